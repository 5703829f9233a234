"""Language preference endpoint."""

from fastapi import APIRouter, Request, status
from fastapi.responses import RedirectResponse

from civic_reporter.config import settings
from civic_reporter.core.exceptions import ValidationError
from civic_reporter.utils.validators import is_safe_url

router = APIRouter()


@router.get(
    "/change-lang/{lang}",
    status_code=303,
    summary="Set language preference",
    description="Store the preferred language in a cookie and go back to the referring page.",
)
async def change_language(lang: str, request: Request) -> RedirectResponse:
    """Remember the caller's language."""
    lang = lang.lower()
    if lang not in settings.supported_languages_list:
        raise ValidationError(
            message="Unsupported language",
            details=[{"field": "lang", "supported": settings.supported_languages_list}],
        )

    referer = request.headers.get("Referer")
    target = referer if is_safe_url(referer, allowed_hosts=[request.url.netloc]) else "/"

    response = RedirectResponse(target, status_code=status.HTTP_303_SEE_OTHER)
    response.set_cookie(
        key=settings.language_cookie_name,
        value=lang,
        max_age=settings.language_cookie_max_age,
        httponly=True,
        samesite="lax",
    )
    return response
