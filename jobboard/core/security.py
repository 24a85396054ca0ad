"""
Passwords, sign-in tokens, the current user, and the admin gate.

A signed-in user is identified by a JWT access token. It is read from the
``Authorization: Bearer`` header, or failing that from the sign-in cookie
set by the session routes.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Union

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.core.config import settings
from jobboard.core.database import get_db, is_storable_id
from jobboard.core.exceptions import AuthorizationDenied
from jobboard.core.logging_config import get_logger
from jobboard.models.user import User

logger = get_logger(__name__)

NOT_AUTHORIZED_MESSAGE = "You are not authorized to view this page"

MIN_PASSWORD_LENGTH = 8

ACCESS_TOKEN_TYPE = "access"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# auto_error=False: a missing header is not an error, the cookie may carry the token
oauth2_scheme_optional = OAuth2PasswordBearer(tokenUrl="/session/token", auto_error=False)


# =============================================================================
# Passwords
# =============================================================================

def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


PASSWORD_RULES = (
    (str.isupper, "must contain at least one uppercase letter"),
    (str.islower, "must contain at least one lowercase letter"),
    (str.isdigit, "must contain at least one digit"),
)


def validate_password_strength(password: str) -> tuple[bool, str]:
    """
    Check a sign-up password.

    Returns ``(True, "")`` when acceptable, otherwise ``(False, message)``
    with the first rule that failed, phrased to follow the field name
    ("Password must be at least 8 characters").
    """
    if len(password) < MIN_PASSWORD_LENGTH:
        return False, f"must be at least {MIN_PASSWORD_LENGTH} characters"

    for has_kind, message in PASSWORD_RULES:
        if not any(has_kind(char) for char in password):
            return False, message

    return True, ""


# =============================================================================
# Tokens
# =============================================================================

def create_access_token(
    subject: Union[str, Any],
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Sign a token for ``subject`` (the user id).

    Claims: ``sub`` (user id as a string), ``iat``, ``exp`` and
    ``type="access"``. Lifetime defaults to ACCESS_TOKEN_EXPIRE_MINUTES.
    """
    issued_at = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    claims = {
        "sub": str(subject),
        "iat": issued_at,
        "exp": issued_at + lifetime,
        "type": ACCESS_TOKEN_TYPE,
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> dict:
    """Verify signature and expiry; raises JWTError otherwise."""
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])


async def _user_for_token(token: str, db: AsyncSession) -> Optional[User]:
    try:
        claims = decode_token(token)
    except JWTError as e:
        logger.debug("Ignoring unusable sign-in token", error=str(e))
        return None

    if claims.get("type") != ACCESS_TOKEN_TYPE:
        logger.warning("Sign-in token has the wrong type", token_type=claims.get("type"))
        return None

    try:
        user_id = int(claims["sub"])
    except (KeyError, TypeError, ValueError):
        logger.warning("Sign-in token without a user id")
        return None

    if not is_storable_id(user_id):
        return None
    return await db.get(User, user_id)


# =============================================================================
# Current user
# =============================================================================

async def get_current_user_optional(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme_optional),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """
    The signed-in user, or None.

    Bad, expired and wrong-type tokens, and tokens of deleted users, all
    read as signed out.
    """
    token = token or request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        return None
    return await _user_for_token(token, db)


async def get_current_user(
    current_user: Optional[User] = Depends(get_current_user_optional),
) -> User:
    if current_user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not signed in",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return current_user


# =============================================================================
# Admin gate
# =============================================================================

def authorize_admin(user: Optional[User]) -> bool:
    """True only for a present user whose admin flag is set."""
    return user is not None and bool(user.admin)


async def require_admin(
    request: Request,
    current_user: Optional[User] = Depends(get_current_user_optional),
) -> User:
    """
    Dependency for admin-only routes.

        @router.get("/admin/users")
        async def list_users(admin: User = Depends(require_admin)):
            ...

    Anonymous and non-admin callers never reach the route: AuthorizationDenied
    is raised, and the handler in jobboard.main turns it into a "notice"
    flash plus a redirect to the sign-in page.
    """
    if not authorize_admin(current_user):
        logger.warning(
            "Admin gate denied request",
            path=request.url.path,
            user_id=current_user.id if current_user else None,
        )
        raise AuthorizationDenied(NOT_AUTHORIZED_MESSAGE)
    return current_user
