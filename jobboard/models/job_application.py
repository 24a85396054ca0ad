from typing import Optional, TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from jobboard.core.database import Base, TimestampMixin

if TYPE_CHECKING:
    from jobboard.models.job_post import JobPost
    from jobboard.models.user import User


class JobApplication(TimestampMixin, Base):
    """
    A user's application to a job post, optionally with an attached CV.

    TABLE STRUCTURE:

        job_applications
        ├── id (INTEGER, PRIMARY KEY)
        ├── job_post_id (INTEGER, FK)     - Post being applied to
        ├── user_id (INTEGER, FK)         - User who applied
        ├── body (TEXT)                   - Application text, never blank
        ├── cv_key (VARCHAR)              - Storage key of the attached CV
        ├── cv_filename (VARCHAR)         - Original filename
        ├── cv_content_type (VARCHAR)
        ├── cv_byte_size (INTEGER)
        ├── created_at (TIMESTAMP)
        └── updated_at (TIMESTAMP)

    CONSTRAINTS:
        - FK to job_posts (ON DELETE CASCADE)
        - FK to users

    The cv_* columns are either all set or all NULL.
    """

    __tablename__ = "job_applications"

    # ==========================================================================
    # Columns
    # ==========================================================================

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    job_post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("job_posts.id", ondelete="CASCADE"),
        nullable=False,
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
    )

    body: Mapped[str] = mapped_column(Text, nullable=False)

    cv_key: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    cv_filename: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    cv_content_type: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    cv_byte_size: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # ==========================================================================
    # Relationships
    # ==========================================================================

    job_post: Mapped["JobPost"] = relationship("JobPost", back_populates="job_applications")

    user: Mapped["User"] = relationship("User", back_populates="job_applications")

    # ==========================================================================
    # Table Configuration
    # ==========================================================================

    __table_args__ = (
        # "Show me all applications for post X"
        Index("ix_job_applications_job_post_id", "job_post_id"),
        # "Show me all applications by user Y"
        Index("ix_job_applications_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<JobApplication {self.id} user={self.user_id} -> post={self.job_post_id}>"

    @property
    def has_cv(self) -> bool:
        return self.cv_key is not None

    def detach_cv(self) -> Optional[str]:
        """Clear the CV columns and return the storage key that was attached."""
        key = self.cv_key
        self.cv_key = None
        self.cv_filename = None
        self.cv_content_type = None
        self.cv_byte_size = None
        return key
