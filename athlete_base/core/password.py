"""Password hashing utilities using passlib with bcrypt.

Never stores or logs raw passwords. The bcrypt cost comes from
``Settings.bcrypt_rounds``; ``make_hasher`` binds it to an injected
Settings instance instead of the process-wide one.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from functools import lru_cache, partial

from passlib.context import CryptContext

from athlete_base.config.settings import Settings, get_settings

# bcrypt hard limit
BCRYPT_MAX_BYTES = 72


@lru_cache
def _pwd_context(rounds: int) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


def _truncate(password: str) -> str:
    encoded = password.encode("utf-8")
    if len(encoded) > BCRYPT_MAX_BYTES:
        return encoded[:BCRYPT_MAX_BYTES].decode("utf-8", errors="ignore")
    return password


def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash a password using bcrypt.

    Args:
        password: Plain text password to hash
        rounds: bcrypt cost; defaults to the process settings

    Returns:
        Hashed password string

    Raises:
        ValueError: If password is empty
    """
    if not password:
        raise ValueError("Password cannot be empty")
    if rounds is None:
        rounds = get_settings().bcrypt_rounds
    return _pwd_context(rounds).hash(_truncate(password))


def verify_password(plain: str, hashed: str) -> bool:
    """Check a password against a stored hash; empty inputs never match."""
    if not plain or not hashed:
        return False
    # The cost is read from the hash itself.
    return _pwd_context(get_settings().bcrypt_rounds).verify(_truncate(plain), hashed)


async def hash_password_async(password: str, rounds: int | None = None) -> str:
    """Hash off the event loop; bcrypt is CPU bound."""
    return await asyncio.to_thread(hash_password, password, rounds)


def make_hasher(settings: Settings) -> Callable[[str], Awaitable[str]]:
    """Async hasher using the bcrypt cost of ``settings``."""
    return partial(hash_password_async, rounds=settings.bcrypt_rounds)
