from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from jobboard.core.database import Base, TimestampMixin

if TYPE_CHECKING:
    from jobboard.models.job_application import JobApplication


class User(TimestampMixin, Base):
    """
    An account that can sign in and apply to job posts.

    TABLE STRUCTURE:

        users
        ├── id (INTEGER, PRIMARY KEY)
        ├── email (VARCHAR, UNIQUE)       - Sign-in identifier
        ├── hashed_password (VARCHAR)     - bcrypt hash
        ├── first_name (VARCHAR)
        ├── last_name (VARCHAR)
        ├── admin (BOOLEAN, INDEX)        - Role flag checked by the admin gate
        ├── created_at (TIMESTAMP)
        └── updated_at (TIMESTAMP)
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )

    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)

    first_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    last_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    admin: Mapped[Optional[bool]] = mapped_column(
        Boolean,
        nullable=True,
        default=False,
        index=True,
    )
    """NULL is treated the same as False."""

    job_applications: Mapped[List["JobApplication"]] = relationship(
        "JobApplication",
        back_populates="user",
    )

    def __repr__(self) -> str:
        return f"<User {self.id} {self.email}{' (admin)' if self.admin else ''}>"

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)
