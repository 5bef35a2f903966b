"""
In-memory repositories.

Backed by a MemoryStore shared across units of work. Every read hands out a
copy, so callers only change stored state through explicit repository calls.
Check-and-set operations contain no await between the check and the write,
which makes them atomic on a single event loop.
"""

from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from src.app.repositories.errors import UserAlreadyExistsError
from src.app.repositories.invite_code_repository import ClaimOutcome, IInviteCodeRepository
from src.app.repositories.rate_limit_repository import IRateLimitRepository
from src.app.repositories.session_repository import ISessionRepository
from src.app.repositories.user_repository import IUserRepository
from src.domain.entities import (
    InviteCode,
    InvitePurpose,
    RateLimitEntry,
    Session,
    User,
    normalize_key,
)


def _copy(model):
    return model.model_copy(deep=True) if model is not None else None


class MemoryStore:
    """Process-local tables, keyed the way the SQL schema is"""

    def __init__(self):
        self.users: Dict[UUID, User] = {}
        self.invite_codes: Dict[str, InviteCode] = {}
        self.rate_limits: Dict[str, RateLimitEntry] = {}
        self.sessions: Dict[str, Session] = {}


class InMemoryUserRepository(IUserRepository):
    def __init__(self, store: MemoryStore):
        self.store = store

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        return _copy(self.store.users.get(user_id))

    async def get_by_username(self, username: str) -> Optional[User]:
        key = normalize_key(username)
        for user in self.store.users.values():
            if user.username_key == key:
                return _copy(user)
        return None

    async def get_by_email(self, email: str) -> Optional[User]:
        key = normalize_key(email)
        for user in self.store.users.values():
            if user.email_key == key:
                return _copy(user)
        return None

    async def list(self) -> List[User]:
        users = sorted(self.store.users.values(), key=lambda u: u.created_at, reverse=True)
        return [_copy(user) for user in users]

    async def create(self, user: User) -> User:
        for existing in self.store.users.values():
            if existing.username_key == user.username_key:
                raise UserAlreadyExistsError("username")
            if existing.email_key == user.email_key:
                raise UserAlreadyExistsError("email")
        self.store.users[user.id] = _copy(user)
        return _copy(user)

    async def update(self, user: User) -> User:
        self.store.users[user.id] = _copy(user)
        return _copy(user)

    async def delete(self, user: User) -> None:
        self.store.users.pop(user.id, None)


class InMemoryInviteCodeRepository(IInviteCodeRepository):
    def __init__(self, store: MemoryStore):
        self.store = store

    async def get_by_code(self, code: str) -> Optional[InviteCode]:
        return _copy(self.store.invite_codes.get(code))

    async def list(self) -> List[InviteCode]:
        codes = sorted(
            self.store.invite_codes.values(), key=lambda c: c.created_at, reverse=True
        )
        return [_copy(code) for code in codes]

    async def create(self, invite_code: InviteCode) -> InviteCode:
        self.store.invite_codes[invite_code.code] = _copy(invite_code)
        return _copy(invite_code)

    async def claim(
        self,
        code: str,
        consumer_id: str,
        purpose: InvitePurpose,
        consumed_at: datetime,
    ) -> ClaimOutcome:
        invite_code = self.store.invite_codes.get(code)
        if invite_code is None:
            return ClaimOutcome.not_found
        if invite_code.is_consumed:
            return ClaimOutcome.already_consumed
        if not invite_code.is_active:
            return ClaimOutcome.revoked
        invite_code.consumed_by = consumer_id
        invite_code.consumed_at = consumed_at
        invite_code.consumed_for = purpose
        return ClaimOutcome.claimed

    async def release(self, code: str, consumer_id: str) -> bool:
        invite_code = self.store.invite_codes.get(code)
        if invite_code is None or invite_code.consumed_by != consumer_id:
            return False
        invite_code.consumed_by = None
        invite_code.consumed_at = None
        invite_code.consumed_for = None
        return True

    async def revoke(self, code: str) -> bool:
        invite_code = self.store.invite_codes.get(code)
        if invite_code is None or invite_code.is_consumed:
            return False
        invite_code.is_active = False
        return True


class InMemoryRateLimitRepository(IRateLimitRepository):
    def __init__(self, store: MemoryStore):
        self.store = store

    async def get_for_update(self, origin: str) -> Optional[RateLimitEntry]:
        return _copy(self.store.rate_limits.get(origin))

    async def list(self) -> List[RateLimitEntry]:
        entries = sorted(
            self.store.rate_limits.values(), key=lambda e: e.last_attempt_at, reverse=True
        )
        return [_copy(entry) for entry in entries]

    async def save(self, entry: RateLimitEntry) -> RateLimitEntry:
        self.store.rate_limits[entry.origin] = _copy(entry)
        return _copy(entry)

    async def delete(self, origin: str) -> None:
        self.store.rate_limits.pop(origin, None)

    async def delete_all(self) -> int:
        removed = len(self.store.rate_limits)
        self.store.rate_limits.clear()
        return removed

    async def delete_idle_since(self, cutoff: datetime) -> int:
        idle = [o for o, e in self.store.rate_limits.items() if e.last_attempt_at < cutoff]
        for origin in idle:
            del self.store.rate_limits[origin]
        return len(idle)


class InMemorySessionRepository(ISessionRepository):
    def __init__(self, store: MemoryStore):
        self.store = store

    async def get_by_token_hash(self, token_hash: str) -> Optional[Session]:
        return _copy(self.store.sessions.get(token_hash))

    async def create(self, session_obj: Session) -> Session:
        self.store.sessions[session_obj.token_hash] = _copy(session_obj)
        return _copy(session_obj)

    async def delete_by_token_hash(self, token_hash: str) -> bool:
        return self.store.sessions.pop(token_hash, None) is not None

    async def delete_by_user_id(self, user_id: UUID) -> int:
        doomed = [h for h, s in self.store.sessions.items() if s.user_id == user_id]
        for token_hash in doomed:
            del self.store.sessions[token_hash]
        return len(doomed)

    async def delete_expired(self, now: datetime) -> int:
        doomed = [h for h, s in self.store.sessions.items() if s.expires_at <= now]
        for token_hash in doomed:
            del self.store.sessions[token_hash]
        return len(doomed)
