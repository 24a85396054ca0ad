from fastapi import APIRouter

from jobboard.api.welcome import router as welcome_router
from jobboard.api.job_posts import router as job_posts_router
from jobboard.api.job_applications import router as job_applications_router
from jobboard.api.sessions import router as sessions_router
from jobboard.api.admin import router as admin_router

# main router
router = APIRouter()

# Each router has its own prefix defined in its file
router.include_router(welcome_router)
router.include_router(job_posts_router)
router.include_router(job_applications_router)
router.include_router(sessions_router)
router.include_router(admin_router)
