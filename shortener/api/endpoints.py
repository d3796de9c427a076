"""
FastAPI Endpoints for URL Shortener Service

This module defines all REST API endpoints with minimal logic.
Endpoints only handle:
- Request validation (Pydantic models)
- Error handling and HTTP responses
- Delegating to service layer

Two routers are exported: the management API under API_PREFIX, and the
catch-all redirect route, which must be included last.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from shortener.api.schemas import CreateUrlRequest, UrlResponse
from shortener.core.exceptions import (
    InvalidCodeError,
    InvalidURLError,
    PersistenceError,
    ShortCodeNotFoundError,
)
from shortener.core.recorder_manager import get_click_recorder
from shortener.core.setting import settings
from shortener.db.session import get_session
from shortener.services.click_recorder import ClickRecorder
from shortener.services.redirect_service import RedirectService
from shortener.services.url_service import URLShorteningService


urls_router = APIRouter(prefix=f"{settings.API_PREFIX}/urls")
redirect_router = APIRouter()


def not_found(short_code: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Short code not found: {short_code}"
    )


@urls_router.post(
    "",
    response_model=UrlResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a short URL",
    description="Takes a long URL and returns a shortened version with a unique code"
)
async def create_short_url(
    body: CreateUrlRequest,
    response: Response,
    session: AsyncSession = Depends(get_session)
) -> UrlResponse:
    """
    Create a new short URL from a long URL.

    Returns:
        UrlResponse for the created link; Location points at its resource

    Raises:
        HTTPException 400: If the URL is rejected by validation
        HTTPException 500: If the link cannot be stored
    """
    try:
        url_service = URLShorteningService(session)
        short_url_obj = await url_service.create_short_url(body.url)
    except InvalidURLError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except PersistenceError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )

    response.headers["Location"] = (
        f"{settings.BASE_URL}{settings.API_PREFIX}/urls/{short_url_obj.short_code}"
    )
    return UrlResponse.from_model(short_url_obj)


@urls_router.get(
    "/{short_code}",
    response_model=UrlResponse,
    summary="Get URL information",
    description="Returns the destination, click count and timestamps of a short URL"
)
async def get_url(
    short_code: str,
    session: AsyncSession = Depends(get_session)
) -> UrlResponse:
    try:
        short_url_obj = await URLShorteningService(session).get_url_info(short_code)
    except PersistenceError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )

    if short_url_obj is None:
        raise not_found(short_code)
    return UrlResponse.from_model(short_url_obj)


@urls_router.delete(
    "/{short_code}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a short URL",
    description="Deletes a short URL by its code"
)
async def delete_url(
    short_code: str,
    session: AsyncSession = Depends(get_session)
) -> Response:
    try:
        deleted = await URLShorteningService(session).delete_url(short_code)
    except PersistenceError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )

    if not deleted:
        raise not_found(short_code)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@redirect_router.get(
    "/{short_code}",
    status_code=settings.REDIRECT_STATUS_CODE,
    response_class=RedirectResponse,
    summary="Redirect to original URL",
    description=(
        "Redirects to the original URL associated with the short code. "
        "The click counter and last click time are updated in the background."
    ),
    responses={
        400: {"description": "Invalid short code format"},
        404: {"description": "Short code not found"},
    }
)
async def redirect_to_url(
    short_code: str,
    session: AsyncSession = Depends(get_session),
    click_recorder: Optional[ClickRecorder] = Depends(get_click_recorder)
) -> RedirectResponse:
    """
    Redirect to the original URL for a given short code.

    Args:
        short_code: The short code to look up
        click_recorder: Background recorder the click is handed to

    Returns:
        RedirectResponse (303 by default) to original URL

    Raises:
        HTTPException 400: If short code format is invalid
        HTTPException 404: If short code not found
        HTTPException 500: If the lookup fails
    """
    redirect_service = RedirectService(session, click_recorder=click_recorder)

    try:
        original_url = await redirect_service.redirect(short_code)
    except InvalidCodeError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                f"Invalid short code format: '{short_code}'. "
                "Short codes must contain only alphanumeric characters."
            )
        )
    except ShortCodeNotFoundError:
        raise not_found(short_code)
    except PersistenceError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )

    return RedirectResponse(
        url=original_url,
        status_code=settings.REDIRECT_STATUS_CODE
    )
