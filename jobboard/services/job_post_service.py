from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.core.database import is_storable_id
from jobboard.core.logging_config import get_logger
from jobboard.models import JobPost
from jobboard.schemas.job_post import JobPostCreate, JobPostUpdate
from jobboard.services.job_application_service import JobApplicationService
from jobboard.services.storage import LocalFileStorage

logger = get_logger(__name__)


class JobPostService:
    """
    CRUD for job posts.

    Posts carry no ownership: anyone may create, edit or delete them.
    Deleting a post deletes its applications and purges their CVs.
    """

    def __init__(self, db: AsyncSession, storage: Optional[LocalFileStorage] = None):
        self.db = db
        self.applications = JobApplicationService(db, storage)

    async def commit(self) -> None:
        await self.applications.commit()

    async def list_job_posts(self) -> List[JobPost]:
        result = await self.db.execute(select(JobPost).order_by(JobPost.id))
        return list(result.scalars().all())

    async def get_job_post(self, job_post_id: int) -> Optional[JobPost]:
        if not is_storable_id(job_post_id):
            return None
        return await self.db.get(JobPost, job_post_id)

    async def create_job_post(self, data: JobPostCreate) -> JobPost:
        job_post = JobPost(title=data.title, body=data.body)

        self.db.add(job_post)
        await self.db.flush()

        logger.info("Job post created", job_post_id=job_post.id, title=job_post.title)
        return job_post

    async def update_job_post(self, job_post: JobPost, data: JobPostUpdate) -> JobPost:
        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            setattr(job_post, field, value)

        await self.db.flush()

        logger.info("Job post updated", job_post_id=job_post.id, fields=sorted(changes))
        return job_post

    async def delete_job_post(self, job_post: JobPost) -> None:
        removed = await self.applications.delete_for_job_post(job_post.id)

        await self.db.delete(job_post)
        await self.db.flush()

        logger.info("Job post deleted", job_post_id=job_post.id, applications_removed=removed)
