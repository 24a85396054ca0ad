"""
=============================================================================
Job Application Routes - nested under a job post
=============================================================================

- GET    /job_posts/{job_post_id}/job_applications            - List the post's applications
- GET    /job_posts/{job_post_id}/job_applications/new        - Blank application form
- POST   /job_posts/{job_post_id}/job_applications            - Apply (multipart, optional cv)
- GET    /job_posts/{job_post_id}/job_applications/{id}       - Show an application
- GET    /job_posts/{job_post_id}/job_applications/{id}/edit  - Application form with values
- PATCH  /job_posts/{job_post_id}/job_applications/{id}       - Update (PUT accepted too)
- DELETE /job_posts/{job_post_id}/job_applications/{id}       - Withdraw
- GET    /job_posts/{job_post_id}/job_applications/{id}/cv    - Download the attached CV

The parent post always comes from the URL. A job_post_id sent in the form
is not read.
"""

from typing import List, Optional

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    HTTPException,
    Request,
    Response,
    UploadFile,
    status,
)
from fastapi.responses import FileResponse, JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.core.database import get_db, is_storable_id
from jobboard.core.exceptions import FieldErrors, RecordInvalid
from jobboard.core.security import get_current_user_optional
from jobboard.models import JobApplication, JobPost, User
from jobboard.schemas.form import FormResponse, InvalidFormResponse
from jobboard.schemas.job_application import JobApplicationResponse
from jobboard.services.job_application_service import JobApplicationService

router = APIRouter(
    prefix="/job_posts/{job_post_id}/job_applications",
    tags=["Job Applications"],
)

MULTIPART = "multipart/form-data"


async def load_job_post(db: AsyncSession, job_post_id: int) -> JobPost:
    job_post = await db.get(JobPost, job_post_id) if is_storable_id(job_post_id) else None
    if job_post is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Job post not found"
        )
    return job_post


async def load_application(
    service: JobApplicationService,
    job_post_id: int,
    application_id: int,
) -> JobApplication:
    await load_job_post(service.db, job_post_id)
    application = await service.get_application(job_post_id, application_id)
    if application is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Job application not found"
        )
    return application


def application_form(
    request: Request,
    job_post_id: int,
    application: Optional[JobApplication] = None,
    values: Optional[dict] = None,
    errors: Optional[FieldErrors] = None,
) -> FormResponse:
    if application is None:
        action = request.url_for("create_job_application", job_post_id=job_post_id)
        method = "post"
    else:
        action = request.url_for(
            "show_job_application",
            job_post_id=job_post_id,
            application_id=application.id,
        )
        method = "patch"

    if values is None:
        values = {
            "body": application.body if application else None,
            "user_id": application.user_id if application else None,
            "cv": application.cv_filename if application else None,
        }

    return FormResponse.build(
        action=str(action),
        method=method,
        enctype=MULTIPART,
        values=values,
        errors=errors,
    )


def invalid_form_response(form: FormResponse) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=InvalidFormResponse(form=form).model_dump(),
    )


@router.get(
    "",
    response_model=List[JobApplicationResponse],
    name="list_job_applications",
    summary="List applications to a job post",
)
async def list_job_applications(job_post_id: int, db: AsyncSession = Depends(get_db)):
    await load_job_post(db, job_post_id)

    service = JobApplicationService(db)
    applications = await service.list_applications(job_post_id)

    return [JobApplicationResponse.model_validate(application) for application in applications]


@router.get(
    "/new",
    response_model=FormResponse,
    name="new_job_application",
    summary="Blank application form",
)
async def new_job_application(
    request: Request,
    job_post_id: int,
    db: AsyncSession = Depends(get_db),
):
    await load_job_post(db, job_post_id)
    return application_form(request, job_post_id)


@router.post(
    "",
    response_model=JobApplicationResponse,
    status_code=status.HTTP_201_CREATED,
    name="create_job_application",
    summary="Apply to a job post",
    responses={422: {"model": InvalidFormResponse}},
    description="""
    Submit an application as `multipart/form-data`.

    - `body` is required and may not be blank
    - `user_id` names the applicant; when omitted the signed-in user applies
    - `cv` is an optional file of any type and size
    """,
)
async def create_job_application(
    request: Request,
    response: Response,
    job_post_id: int,
    body: Optional[str] = Form(None),
    user_id: Optional[int] = Form(None),
    cv: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_optional),
):
    await load_job_post(db, job_post_id)

    if user_id is None and current_user is not None:
        user_id = current_user.id

    service = JobApplicationService(db)

    try:
        application = await service.create_application(
            job_post_id=job_post_id,
            body=body,
            user_id=user_id,
            cv=cv,
        )
    except RecordInvalid as e:
        form = application_form(
            request,
            job_post_id,
            values={"body": body, "user_id": user_id, "cv": None},
            errors=e.errors,
        )
        return invalid_form_response(form)

    await service.commit()
    await db.refresh(application)

    response.headers["Location"] = str(
        request.url_for(
            "show_job_application",
            job_post_id=job_post_id,
            application_id=application.id,
        )
    )
    return JobApplicationResponse.model_validate(application)


@router.get(
    "/{application_id}",
    response_model=JobApplicationResponse,
    name="show_job_application",
    summary="Show an application",
)
async def show_job_application(
    job_post_id: int,
    application_id: int,
    db: AsyncSession = Depends(get_db),
):
    service = JobApplicationService(db)
    application = await load_application(service, job_post_id, application_id)
    return JobApplicationResponse.model_validate(application)


@router.get(
    "/{application_id}/edit",
    response_model=FormResponse,
    name="edit_job_application",
    summary="Application form with current values",
)
async def edit_job_application(
    request: Request,
    job_post_id: int,
    application_id: int,
    db: AsyncSession = Depends(get_db),
):
    service = JobApplicationService(db)
    application = await load_application(service, job_post_id, application_id)
    return application_form(request, job_post_id, application)


@router.api_route(
    "/{application_id}",
    methods=["PATCH", "PUT"],
    response_model=JobApplicationResponse,
    name="update_job_application",
    summary="Update an application",
    responses={422: {"model": InvalidFormResponse}},
    description="Fields left out are kept. A new `cv` replaces the old one.",
)
async def update_job_application(
    request: Request,
    job_post_id: int,
    application_id: int,
    body: Optional[str] = Form(None),
    user_id: Optional[int] = Form(None),
    cv: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
):
    service = JobApplicationService(db)
    application = await load_application(service, job_post_id, application_id)

    # Form() turns an empty field into None; a body sent empty is still a body
    submitted = await request.form()
    if body is None and isinstance(submitted.get("body"), str):
        body = submitted["body"]

    try:
        application = await service.update_application(
            application,
            body=body,
            user_id=user_id,
            cv=cv,
        )
    except RecordInvalid as e:
        form = application_form(
            request,
            job_post_id,
            application,
            values={
                "body": application.body if body is None else body,
                "user_id": application.user_id if user_id is None else user_id,
                "cv": application.cv_filename,
            },
            errors=e.errors,
        )
        return invalid_form_response(form)

    await service.commit()
    await db.refresh(application)

    return JobApplicationResponse.model_validate(application)


@router.delete(
    "/{application_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    name="destroy_job_application",
    summary="Withdraw an application",
)
async def destroy_job_application(
    job_post_id: int,
    application_id: int,
    db: AsyncSession = Depends(get_db),
):
    service = JobApplicationService(db)
    application = await load_application(service, job_post_id, application_id)

    await service.delete_application(application)
    await service.commit()

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{application_id}/cv",
    response_class=FileResponse,
    name="download_job_application_cv",
    summary="Download the attached CV",
)
async def download_job_application_cv(
    job_post_id: int,
    application_id: int,
    db: AsyncSession = Depends(get_db),
):
    service = JobApplicationService(db)
    application = await load_application(service, job_post_id, application_id)

    if not application.has_cv or not service.storage.exists(application.cv_key):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No CV attached"
        )

    return FileResponse(
        service.storage.path_for(application.cv_key),
        media_type=application.cv_content_type,
        filename=application.cv_filename,
    )
