"""
API Request and Response Schemas

This module defines all Pydantic models for API requests and responses.
Separated from endpoints to keep concerns separated and enable reuse.
"""

import re
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from shortener.core.setting import settings
from shortener.db.models import ShortURL

URL_PATTERN = re.compile(r"^https?://", re.IGNORECASE)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive timestamps (SQLite does not keep the offset)."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class CreateUrlRequest(BaseModel):
    """Request model for URL shortening endpoint."""
    url: str = Field(..., description="The long URL to shorten")

    @field_validator("url")
    @classmethod
    def check_url(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("URL cannot be blank")
        if len(value) > settings.MAX_URL_LENGTH:
            raise ValueError(f"URL cannot exceed {settings.MAX_URL_LENGTH} characters")
        if not URL_PATTERN.match(value):
            raise ValueError("URL must start with http:// or https://")
        return value


class UrlResponse(BaseModel):
    """Response model describing a short URL and its usage."""
    short_code: str = Field(..., description="The generated short code")
    short_url: str = Field(..., description="The complete short URL")
    original_url: str = Field(..., description="The original long URL")
    clicks: int = Field(..., description="Number of recorded redirects")
    created_at: datetime
    last_clicked_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, short_url: ShortURL, base_url: Optional[str] = None) -> "UrlResponse":
        base_url = settings.BASE_URL if base_url is None else base_url
        return cls(
            short_code=short_url.short_code,
            short_url=f"{base_url}/{short_url.short_code}",
            original_url=short_url.original_url,
            clicks=short_url.click_count,
            created_at=as_utc(short_url.created_at),
            last_clicked_at=as_utc(short_url.last_clicked_at),
        )
