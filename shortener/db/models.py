"""
Database Models for URL Shortener Service

This module defines the SQLModel database schemas for:
- ShortURL: Stores the mapping between short codes and original URLs
- LinkIdSequence: Issues link identities on databases without sequences

Design Decisions:
- id is the issued identity itself; short_code is its base62 encoding
- Unique index on short_code for fast lookups (most common operation)
- click_count/last_clicked_at are only written by the background click path
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import BigInteger, Column, DateTime, Sequence, String, Text
from sqlmodel import Field, SQLModel

# Postgres identity source; ignored by dialects without sequences
SHORT_URL_ID_SEQUENCE = Sequence("short_url_id_seq", start=1, metadata=SQLModel.metadata)

# 2^63 - 1 needs 11 base62 characters
SHORT_CODE_MAX_LENGTH = 11


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ShortURL(SQLModel, table=True):
    """
    Main table storing URL shortening mappings.

    Fields:
    - id: Identity issued by the identity source (not auto-generated here)
    - original_url: The long URL that was shortened
    - short_code: Unique base62 encoding of id
    - created_at: Timestamp when URL was shortened
    - click_count: Number of recorded redirects (updated asynchronously)
    - last_clicked_at: Time of the most recent recorded redirect

    Indexes:
    - short_code: Unique index for fast lookups (most critical path)
    - created_at: For time-based queries
    """
    __tablename__ = "short_urls"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigInteger, primary_key=True, autoincrement=False)
    )
    original_url: str = Field(sa_column=Column(Text, nullable=False))
    short_code: str = Field(
        sa_column=Column(String(SHORT_CODE_MAX_LENGTH), nullable=False, unique=True, index=True),
        max_length=SHORT_CODE_MAX_LENGTH
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True)
    )
    click_count: int = Field(
        default=0,
        sa_column=Column(BigInteger, nullable=False, default=0, server_default="0")
    )
    last_clicked_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True)
    )


class LinkIdSequence(SQLModel, table=True):
    """
    Identity issuance table for SQLite.

    Every row inserted consumes one identity. AUTOINCREMENT guarantees ids
    are never handed out twice, even after rows are deleted.
    """
    __tablename__ = "link_id_sequence"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Optional[int] = Field(default=None, primary_key=True)
    issued_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
