from fastapi import APIRouter, Request

from jobboard.core.config import settings
from jobboard.core.flash import consume_flash

router = APIRouter(tags=["Welcome"])


@router.get("/", name="root", summary="Home page")
@router.get("/welcome/index", name="welcome_index", summary="Home page")
async def welcome(request: Request):
    """Entry point: where to go next, plus any pending flash notice."""
    return {
        "name": settings.PROJECT_NAME,
        "message": f"Welcome to {settings.PROJECT_NAME}",
        "flash": consume_flash(request),
        "links": {
            "job_posts": str(request.url_for("list_job_posts")),
            "sign_in": str(request.url_for("sign_in")),
            "sign_up": str(request.url_for("sign_up")),
            "documentation": "/docs",
        },
    }
