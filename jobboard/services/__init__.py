from jobboard.services.job_post_service import JobPostService
from jobboard.services.job_application_service import JobApplicationService
from jobboard.services.user_service import UserService

__all__ = ["JobPostService", "JobApplicationService", "UserService"]
