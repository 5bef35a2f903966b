"""
Credential hashing and password policy.

Hashes are bcrypt; the policy is data (built from configuration) rather
than hard-coded rules, so deployments can tighten or relax it.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

import bcrypt

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")


@lru_cache(maxsize=None)
def dummy_hash(rounds: int) -> bytes:
    """Throwaway hash at the same cost as stored hashes, one per cost factor"""
    return bcrypt.hashpw(b"dummy_password", bcrypt.gensalt(rounds))


def hash_password(password: str, rounds: int = 12) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds)).decode("utf-8")


def verify_password(password: str, password_hash: Optional[str], rounds: int = 12) -> bool:
    """
    Constant-time check; always runs bcrypt even when no hash exists.

    rounds must match the cost of stored hashes so an unknown username
    takes as long as a wrong password.
    """
    if not password_hash:
        bcrypt.checkpw(password.encode("utf-8"), dummy_hash(rounds))
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


@dataclass(frozen=True)
class PasswordPolicy:
    min_length: int = 8
    require_upper: bool = True
    require_lower: bool = True
    require_digit: bool = True
    symbols: str = "@$!%*?&"

    @classmethod
    def from_config(cls, config) -> "PasswordPolicy":
        return cls(
            min_length=config.PASSWORD_MIN_LENGTH,
            require_upper=config.PASSWORD_REQUIRE_UPPER,
            require_lower=config.PASSWORD_REQUIRE_LOWER,
            require_digit=config.PASSWORD_REQUIRE_DIGIT,
            symbols=config.PASSWORD_SYMBOLS,
        )

    def violation(self, password: str) -> Optional[str]:
        """Return a human-readable reason the password is too weak, or None."""
        if len(password) < self.min_length:
            return f"Password must be at least {self.min_length} characters long."

        missing = []
        if self.require_upper and not any(c.isupper() for c in password):
            missing.append("uppercase")
        if self.require_lower and not any(c.islower() for c in password):
            missing.append("lowercase")
        if self.require_digit and not any(c.isdigit() for c in password):
            missing.append("number")
        if self.symbols and not any(c in self.symbols for c in password):
            missing.append(f"special character ({self.symbols})")

        if missing:
            return "Password must contain " + ", ".join(missing) + "."
        return None


def username_violation(username: str, min_length: int = 3) -> Optional[str]:
    if not USERNAME_PATTERN.match(username):
        return "Username can only contain letters, numbers, underscores, and hyphens."
    if len(username) < min_length:
        return f"Username must be at least {min_length} characters long."
    return None
