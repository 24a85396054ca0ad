from typing import List, Optional

from fastapi import UploadFile
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.core.database import is_storable_id
from jobboard.core.exceptions import FieldErrors, RecordInvalid
from jobboard.core.logging_config import get_logger
from jobboard.models import JobApplication, JobPost, User
from jobboard.services.storage import LocalFileStorage, get_storage, is_upload_present

logger = get_logger(__name__)


def validate_job_application(
    body: Optional[str],
    job_post: Optional[JobPost],
    user: Optional[User],
) -> FieldErrors:
    """
    Check an application's fields and references.

    Args:
        body: Application text; None, empty and whitespace-only are all blank
        job_post: The resolved parent post, or None if it does not exist
        user: The resolved applicant, or None if missing or nonexistent

    Returns:
        FieldErrors: Empty when the application is valid
    """
    errors: FieldErrors = {}

    if body is None or not body.strip():
        errors.setdefault("body", []).append("can't be blank")

    if job_post is None:
        errors.setdefault("job_post", []).append("must exist")

    if user is None:
        errors.setdefault("user", []).append("must exist")

    return errors


class JobApplicationService:
    """
    Business logic for applications to a job post.

    KEY CONCEPTS:

    1. Parent scoping
       Every lookup takes the parent post id from the URL and checks it
       against the stored foreign key. An application reached through the
       wrong post is treated as missing.

    2. Validation
       Body must not be blank; post and applicant must exist. All errors
       are collected and raised together as RecordInvalid before anything
       is written or any file is stored.

    3. Attachments
       CV files removed from a record are purged only after the
       transaction commits (see commit()). Files stored during a
       transaction that fails to flush or commit are deleted again.
    """

    def __init__(self, db: AsyncSession, storage: Optional[LocalFileStorage] = None):
        self.db = db
        self.storage = storage or get_storage()
        self._purge_queue: List[str] = []
        self._new_keys: List[str] = []

    async def commit(self) -> None:
        """Commit the session, then purge files detached during it."""
        try:
            await self.db.commit()
        except Exception:
            await self._discard_new_files()
            raise

        self._new_keys = []
        keys, self._purge_queue = self._purge_queue, []
        for key in keys:
            await self.storage.delete(key)

    async def _flush(self) -> None:
        try:
            await self.db.flush()
        except Exception:
            await self._discard_new_files()
            raise

    async def _discard_new_files(self) -> None:
        # The rows that referenced these files never made it to the database
        keys, self._new_keys = self._new_keys, []
        self._purge_queue = []
        for key in keys:
            await self.storage.delete(key)
        if keys:
            logger.warning("Discarded attachments of a failed write", keys=keys)

    async def _find_job_post(self, job_post_id: int) -> Optional[JobPost]:
        if not is_storable_id(job_post_id):
            return None
        return await self.db.get(JobPost, job_post_id)

    async def _find_user(self, user_id: Optional[int]) -> Optional[User]:
        if not is_storable_id(user_id):
            return None
        return await self.db.get(User, user_id)

    async def list_applications(self, job_post_id: int) -> List[JobApplication]:
        result = await self.db.execute(
            select(JobApplication)
            .where(JobApplication.job_post_id == job_post_id)
            .order_by(JobApplication.id)
        )
        return list(result.scalars().all())

    async def get_application(
        self,
        job_post_id: int,
        application_id: int
    ) -> Optional[JobApplication]:
        """
        if not is_storable_id(application_id):
            return None

        Get an application by ID, scoped to its parent post.

        Returns:
            Optional[JobApplication]: None if absent or filed under another post
        """
        application = await self.db.get(JobApplication, application_id)

        if application is None:
            return None

        if application.job_post_id != job_post_id:
            logger.warning(
                "Application requested through the wrong job post",
                application_id=application_id,
                requested_job_post_id=job_post_id,
                actual_job_post_id=application.job_post_id,
            )
            return None

        return application

    async def create_application(
        self,
        job_post_id: int,
        body: Optional[str],
        user_id: Optional[int],
        cv: Optional[UploadFile] = None,
    ) -> JobApplication:
        """
        Submit a new application.

        WORKFLOW:
        1. Resolve the parent post and the applicant
        2. Validate body and references
        3. Store the CV, if one was uploaded
        4. Insert the application

        Raises:
            RecordInvalid: If any field or reference is invalid
        """
        job_post = await self._find_job_post(job_post_id)
        user = await self._find_user(user_id)

        errors = validate_job_application(body, job_post, user)
        if errors:
            logger.info("Application rejected", job_post_id=job_post_id, user_id=user_id, errors=errors)
            raise RecordInvalid(errors)

        application = JobApplication(
            job_post_id=job_post.id,
            user_id=user.id,
            body=body,
        )

        if is_upload_present(cv):
            await self._attach_cv(application, cv)

        self.db.add(application)
        await self._flush()

        logger.info(
            "Application submitted",
            application_id=application.id,
            job_post_id=job_post.id,
            user_id=user.id,
            has_cv=application.has_cv,
        )

        return application

    async def update_application(
        self,
        application: JobApplication,
        body: Optional[str] = None,
        user_id: Optional[int] = None,
        cv: Optional[UploadFile] = None,
    ) -> JobApplication:
        """
        Change an application. Arguments left as None are kept as they are.

        The parent post never changes here; it is fixed by the URL.

        Raises:
            RecordInvalid: If the resulting application would be invalid
        """
        new_body = application.body if body is None else body
        new_user_id = application.user_id if user_id is None else user_id

        job_post = await self._find_job_post(application.job_post_id)
        user = await self._find_user(new_user_id)

        errors = validate_job_application(new_body, job_post, user)
        if errors:
            logger.info("Application update rejected", application_id=application.id, errors=errors)
            raise RecordInvalid(errors)

        application.body = new_body
        application.user_id = user.id

        if is_upload_present(cv):
            old_key = application.detach_cv()
            if old_key:
                self._purge_queue.append(old_key)
            await self._attach_cv(application, cv)

        await self._flush()

        logger.info("Application updated", application_id=application.id)

        return application

    async def delete_application(self, application: JobApplication) -> None:
        key = application.detach_cv()
        if key:
            self._purge_queue.append(key)

        await self.db.delete(application)
        await self._flush()

        logger.info(
            "Application withdrawn",
            application_id=application.id,
            job_post_id=application.job_post_id,
        )

    async def delete_for_job_post(self, job_post_id: int) -> int:
        """Delete every application of a post; returns how many were removed."""
        applications = await self.list_applications(job_post_id)
        for application in applications:
            key = application.detach_cv()
            if key:
                self._purge_queue.append(key)
            await self.db.delete(application)
        await self._flush()
        return len(applications)

    async def _attach_cv(self, application: JobApplication, cv: UploadFile) -> None:
        stored = await self.storage.save(cv)
        self._new_keys.append(stored.key)
        application.cv_key = stored.key
        application.cv_filename = stored.filename
        application.cv_content_type = stored.content_type
        application.cv_byte_size = stored.byte_size
