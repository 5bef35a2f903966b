"""
RateLimitEntry Entity

Per-origin attempt counter for credential-bearing endpoints.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Column, DateTime, Field, Index, SQLModel


class RateLimitEntry(SQLModel, table=True):
    """
    RateLimitEntry entity - attempt window and block state for one origin.

    Business Rules:
    - attempts only counts within [first_attempt_at, first_attempt_at + window)
    - blocked_until is set when attempts exceed the configured maximum
    - Entries idle for the retention period are purged regardless of block state
    """

    __tablename__ = "rate_limit_entries"

    origin: str = Field(primary_key=True, max_length=255)

    attempts: int = Field(default=0)
    first_attempt_at: datetime = Field(sa_column=Column(DateTime))
    last_attempt_at: datetime = Field(sa_column=Column(DateTime))

    blocked: bool = Field(default=False)
    blocked_until: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_rate_limit_last_attempt", "last_attempt_at"),)
