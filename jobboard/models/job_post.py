from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from jobboard.core.database import Base, TimestampMixin

if TYPE_CHECKING:
    from jobboard.models.job_application import JobApplication


TITLE_MAX_LENGTH = 255


class JobPost(TimestampMixin, Base):
    """
    A job listing.

        job_posts
        ├── id (INTEGER, PRIMARY KEY)
        ├── title (VARCHAR(255))
        ├── body (TEXT)
        ├── created_at (TIMESTAMP)
        └── updated_at (TIMESTAMP)
    """

    __tablename__ = "job_posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    title: Mapped[Optional[str]] = mapped_column(String(TITLE_MAX_LENGTH), nullable=True)

    body: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Applications go with their post. The service removes them (and their
    # stored CVs) explicitly; passive_deletes keeps the ORM from lazy loading
    # the collection on delete.
    job_applications: Mapped[List["JobApplication"]] = relationship(
        "JobApplication",
        back_populates="job_post",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<JobPost {self.id} {self.title!r}>"
