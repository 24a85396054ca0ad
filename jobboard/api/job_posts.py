"""
=============================================================================
Job Post Routes
=============================================================================

- GET    /job_posts                 - List all posts
- GET    /job_posts/new             - Blank post form
- POST   /job_posts                 - Create a post
- GET    /job_posts/{id}            - Show a post
- GET    /job_posts/{id}/edit       - Post form with current values
- PATCH  /job_posts/{id}            - Update a post (PUT accepted too)
- DELETE /job_posts/{id}            - Delete a post and its applications

No sign-in is required for any of these.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.core.database import get_db
from jobboard.models import JobPost
from jobboard.schemas.form import FormResponse
from jobboard.schemas.job_post import JobPostCreate, JobPostResponse, JobPostUpdate
from jobboard.services.job_post_service import JobPostService

router = APIRouter(prefix="/job_posts", tags=["Job Posts"])


async def load_job_post(service: JobPostService, job_post_id: int) -> JobPost:
    job_post = await service.get_job_post(job_post_id)
    if job_post is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Job post not found"
        )
    return job_post


def job_post_form(request: Request, job_post: Optional[JobPost] = None) -> FormResponse:
    if job_post is None:
        return FormResponse.build(
            action=str(request.url_for("create_job_post")),
            values={"title": None, "body": None},
        )
    return FormResponse.build(
        action=str(request.url_for("show_job_post", job_post_id=job_post.id)),
        method="patch",
        values={"title": job_post.title, "body": job_post.body},
    )


@router.get(
    "",
    response_model=List[JobPostResponse],
    name="list_job_posts",
    summary="List job posts",
)
async def list_job_posts(db: AsyncSession = Depends(get_db)):
    service = JobPostService(db)
    job_posts = await service.list_job_posts()
    return [JobPostResponse.model_validate(job_post) for job_post in job_posts]


@router.get(
    "/new",
    response_model=FormResponse,
    name="new_job_post",
    summary="Blank job post form",
)
async def new_job_post(request: Request):
    return job_post_form(request)


@router.post(
    "",
    response_model=JobPostResponse,
    status_code=status.HTTP_201_CREATED,
    name="create_job_post",
    summary="Create a job post",
    description="Creates the post and points the `Location` header at it.",
)
async def create_job_post(
    request: Request,
    response: Response,
    job_post_data: JobPostCreate,
    db: AsyncSession = Depends(get_db),
):
    service = JobPostService(db)

    job_post = await service.create_job_post(job_post_data)
    await service.commit()
    await db.refresh(job_post)

    response.headers["Location"] = str(request.url_for("show_job_post", job_post_id=job_post.id))
    return JobPostResponse.model_validate(job_post)


@router.get(
    "/{job_post_id}",
    response_model=JobPostResponse,
    name="show_job_post",
    summary="Show a job post",
)
async def show_job_post(job_post_id: int, db: AsyncSession = Depends(get_db)):
    job_post = await load_job_post(JobPostService(db), job_post_id)
    return JobPostResponse.model_validate(job_post)


@router.get(
    "/{job_post_id}/edit",
    response_model=FormResponse,
    name="edit_job_post",
    summary="Job post form with current values",
)
async def edit_job_post(
    request: Request,
    job_post_id: int,
    db: AsyncSession = Depends(get_db),
):
    job_post = await load_job_post(JobPostService(db), job_post_id)
    return job_post_form(request, job_post)


@router.api_route(
    "/{job_post_id}",
    methods=["PATCH", "PUT"],
    response_model=JobPostResponse,
    name="update_job_post",
    summary="Update a job post",
)
async def update_job_post(
    job_post_id: int,
    job_post_data: JobPostUpdate,
    db: AsyncSession = Depends(get_db),
):
    service = JobPostService(db)
    job_post = await load_job_post(service, job_post_id)

    job_post = await service.update_job_post(job_post, job_post_data)
    await service.commit()
    await db.refresh(job_post)

    return JobPostResponse.model_validate(job_post)


@router.delete(
    "/{job_post_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    name="destroy_job_post",
    summary="Delete a job post",
    description="Also deletes every application to the post and their CVs.",
)
async def destroy_job_post(job_post_id: int, db: AsyncSession = Depends(get_db)):
    service = JobPostService(db)
    job_post = await load_job_post(service, job_post_id)

    await service.delete_job_post(job_post)
    await service.commit()

    return Response(status_code=status.HTTP_204_NO_CONTENT)
