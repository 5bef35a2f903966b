from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from src.api.utils.client_ip import mask_origin
from src.app.services.rate_limiter import RateLimiter
from src.app.use_cases.auth import SessionInfo
from src.depends import get_rate_limiter, require_admin

router = APIRouter(prefix="/admin/rate-limits", tags=["Rate Limits"])


class RateLimitEntryInfo(BaseModel):
    origin: str
    attempts: int
    first_attempt_at: datetime
    last_attempt_at: datetime
    blocked: bool
    blocked_until: Optional[datetime] = None


class RateLimitStats(BaseModel):
    total_entries: int
    currently_blocked: int


class ListRateLimitsResponse(BaseModel):
    stats: RateLimitStats
    entries: List[RateLimitEntryInfo]


class ClearRateLimitsResponse(BaseModel):
    success: bool
    cleared: int
    message: str


@router.get("", status_code=status.HTTP_200_OK, response_model=ListRateLimitsResponse)
async def list_rate_limits(
    admin: SessionInfo = Depends(require_admin),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    """Tracked origins with partially masked addresses"""
    entries = await limiter.list_entries()
    now = limiter.clock()
    blocked = [
        e for e in entries if e.blocked and e.blocked_until and e.blocked_until > now
    ]
    return ListRateLimitsResponse(
        stats=RateLimitStats(total_entries=len(entries), currently_blocked=len(blocked)),
        entries=[
            RateLimitEntryInfo(
                origin=mask_origin(e.origin),
                attempts=e.attempts,
                first_attempt_at=e.first_attempt_at,
                last_attempt_at=e.last_attempt_at,
                blocked=e.blocked,
                blocked_until=e.blocked_until,
            )
            for e in entries
        ],
    )


@router.delete("", status_code=status.HTTP_200_OK, response_model=ClearRateLimitsResponse)
async def clear_rate_limits(
    admin: SessionInfo = Depends(require_admin),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    """Unblock every origin"""
    cleared = await limiter.clear_all()
    return ClearRateLimitsResponse(
        success=True, cleared=cleared, message=f"Cleared {cleared} rate limit entries."
    )
