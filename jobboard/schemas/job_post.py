from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from jobboard.models.job_post import TITLE_MAX_LENGTH


class JobPostBase(BaseModel):
    title: Optional[str] = Field(None, max_length=TITLE_MAX_LENGTH)
    body: Optional[str] = None


class JobPostCreate(JobPostBase):
    """Payload for POST /job_posts."""


class JobPostUpdate(JobPostBase):
    """Payload for PATCH /job_posts/{id}; only the fields sent are changed."""


class JobPostResponse(JobPostBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    updated_at: datetime
