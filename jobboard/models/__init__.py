from jobboard.models.user import User
from jobboard.models.job_post import JobPost
from jobboard.models.job_application import JobApplication

__all__ = [
    "User",
    "JobPost",
    "JobApplication",
]
