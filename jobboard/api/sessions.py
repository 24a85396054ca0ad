"""
=============================================================================
Authentication Routes - sign up, sign in, sign out
=============================================================================

A successful sign-up or sign-in returns a bearer token and also stores it
in the HTTP-only sign-in cookie, so both API clients and browsers stay
signed in on later requests.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.core.config import settings, is_production
from jobboard.core.database import get_db
from jobboard.core.exceptions import FieldErrors, RecordInvalid
from jobboard.core.flash import consume_flash
from jobboard.core.logging_config import get_logger
from jobboard.core.security import create_access_token, get_current_user
from jobboard.models import User
from jobboard.schemas.form import FormResponse, InvalidFormResponse
from jobboard.schemas.user import LoginRequest, TokenResponse, UserCreate, UserResponse
from jobboard.services.user_service import UserService

logger = get_logger(__name__)

router = APIRouter(tags=["Authentication"])

BAD_CREDENTIALS_MESSAGE = "Bad email or password."


def sign_in(response: Response, user: User) -> TokenResponse:
    """Issue a token for ``user`` and put it in the sign-in cookie."""
    token = create_access_token(subject=user.id)
    max_age = settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60

    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=max_age,
        httponly=True,
        samesite="lax",
        secure=is_production(),
    )

    logger.info("User signed in", user_id=user.id)

    return TokenResponse(access_token=token, token_type="bearer", expires_in=max_age)


def sign_up_form(
    request: Request,
    values: Optional[dict] = None,
    errors: Optional[FieldErrors] = None,
) -> FormResponse:
    return FormResponse.build(
        action=str(request.url_for("create_user")),
        values=values or {"email": None, "first_name": None, "last_name": None},
        errors=errors,
    )


@router.get(
    "/sign_up",
    response_model=FormResponse,
    name="sign_up",
    summary="Sign-up form",
)
async def new_user(request: Request):
    return sign_up_form(request)


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    name="create_user",
    summary="Sign up",
    responses={422: {"model": InvalidFormResponse}},
    description="""
    Create an account and sign in as it.

    **Requirements:**
    - E-mail must be unique
    - Password must be at least 8 characters with uppercase, lowercase, and digit
    """,
)
async def create_user(
    request: Request,
    response: Response,
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db),
):
    service = UserService(db)

    try:
        user = await service.sign_up(user_data)
    except RecordInvalid as e:
        form = sign_up_form(
            request,
            values={
                "email": user_data.email,
                "first_name": user_data.first_name,
                "last_name": user_data.last_name,
            },
            errors=e.errors,
        )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=InvalidFormResponse(form=form).model_dump(),
        )

    await db.commit()
    await db.refresh(user)

    sign_in(response, user)
    return UserResponse.model_validate(user)


def sign_in_form(request: Request) -> dict:
    return FormResponse.build(
        action=str(request.url_for("create_session")),
        values={"email": None},
    ).model_dump()


@router.get(
    "/sign_in",
    name="sign_in",
    summary="Sign-in form",
    description="Also returns, and clears, any pending flash notice.",
)
async def new_session(request: Request):
    return {
        "flash": consume_flash(request),
        "form": sign_in_form(request),
    }


@router.post(
    "/session",
    response_model=TokenResponse,
    name="create_session",
    summary="Sign in",
)
async def create_session(
    response: Response,
    login_data: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Raises:
        HTTPException 401: Invalid credentials (same message for an
            unknown e-mail and a wrong password)
    """
    user = await UserService(db).authenticate(login_data.email, login_data.password)

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=BAD_CREDENTIALS_MESSAGE,
            headers={"WWW-Authenticate": "Bearer"},
        )

    return sign_in(response, user)


@router.post(
    "/session/token",
    response_model=TokenResponse,
    summary="Sign in with OAuth2 form",
    description="OAuth2 password-form sign-in, used by the API docs' Authorize button.",
    include_in_schema=False,
)
async def create_session_from_form(
    response: Response,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db),
):
    # The OAuth2 form calls the e-mail "username"
    user = await UserService(db).authenticate(form_data.username, form_data.password)

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=BAD_CREDENTIALS_MESSAGE,
            headers={"WWW-Authenticate": "Bearer"},
        )

    return sign_in(response, user)


@router.delete(
    "/sign_out",
    name="sign_out",
    summary="Sign out",
    status_code=status.HTTP_303_SEE_OTHER,
    response_class=RedirectResponse,
)
async def destroy_session(request: Request):
    redirect = RedirectResponse(
        url=str(request.url_for("sign_in")),
        status_code=status.HTTP_303_SEE_OTHER,
    )
    redirect.delete_cookie(settings.SESSION_COOKIE_NAME)
    return redirect


@router.get(
    "/users/me",
    response_model=UserResponse,
    summary="Current user",
)
async def get_me(current_user: User = Depends(get_current_user)):
    return UserResponse.model_validate(current_user)
