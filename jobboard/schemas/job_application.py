from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class JobApplicationResponse(BaseModel):
    """
    An application as returned by the API.

    The CV is described by its metadata; the file itself is served by
    GET /job_posts/{job_post_id}/job_applications/{id}/cv.
    """

    model_config = ConfigDict(from_attributes=True)

    id: int
    job_post_id: int
    user_id: int
    body: str
    has_cv: bool
    cv_filename: Optional[str] = None
    cv_content_type: Optional[str] = None
    cv_byte_size: Optional[int] = None
    created_at: datetime
    updated_at: datetime
