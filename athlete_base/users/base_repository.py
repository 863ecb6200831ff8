"""Shared email-keyed repository behaviour for players and coaches.

Uniqueness is enforced in two layers:
- check_email_exists: a cheap pre-check before any hashing or write
- the unique index on lower(email): the source of truth, surfaced as
  UniqueViolationError by the pool when a concurrent request wins the race

create_if_absent folds both layers into one Created | AlreadyExists | Failed result.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, ClassVar, Generic, TypeVar

from loguru import logger
from sqlalchemy import exists, func, insert, select

from athlete_base.db.errors import DatabaseError, UniqueViolationError
from athlete_base.db.models import Base
from athlete_base.db.pool import ConnectionPool
from athlete_base.registration.errors import (
    AvailabilityCheckError,
    EmailAlreadyRegisteredError,
    RecordCreationError,
    RecordLookupError,
    RegistrationError,
)
from athlete_base.registration.normalize import normalize_email
from athlete_base.registration.types import AlreadyExists, Created, CreateResult, Failed

RecordT = TypeVar("RecordT")
ProfileT = TypeVar("ProfileT")


class BaseRepository(Generic[RecordT, ProfileT]):
    """Email-keyed persistence for one account table."""

    model: ClassVar[type[Base]]
    entity: ClassVar[str]

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def _insert_values(self, record: RecordT) -> dict[str, Any]:
        raise NotImplementedError

    def _to_profile(self, row: dict[str, Any]) -> ProfileT:
        raise NotImplementedError

    async def check_email_exists(self, email: str) -> bool:
        """Case-insensitive existence check on the normalized email.

        Raises:
            AvailabilityCheckError: If the query fails
        """
        normalized = normalize_email(email)
        statement = select(exists().where(func.lower(self.model.email) == normalized).label("email_taken"))
        try:
            rows = await self._pool.query(statement)
        except DatabaseError as e:
            logger.error(f"[{self.entity.upper()}] Email availability check failed: {type(e).__name__}")
            raise AvailabilityCheckError() from e
        return bool(rows and rows[0].get("email_taken"))

    async def create(self, record: RecordT) -> str:
        """Insert a record and return its generated id.

        Raises:
            EmailAlreadyRegisteredError: If the unique email index rejects the row
            RecordCreationError: For any other insert failure
        """
        statement = insert(self.model).values(**self._insert_values(record)).returning(self.model.id)
        try:
            rows = await self._pool.query(statement)
        except UniqueViolationError as e:
            logger.warning(f"[{self.entity.upper()}] Insert rejected by unique email constraint")
            raise EmailAlreadyRegisteredError() from e
        except DatabaseError as e:
            logger.error(f"[{self.entity.upper()}] Insert failed: {type(e).__name__}")
            raise RecordCreationError(self.entity) from e

        if not rows:
            logger.error(f"[{self.entity.upper()}] Insert returned no id")
            raise RecordCreationError(self.entity)
        return str(rows[0]["id"])

    async def get_by_email(self, email: str) -> ProfileT | None:
        """Case-insensitive lookup; None when no record matches.

        Raises:
            RecordLookupError: If the query fails
        """
        normalized = normalize_email(email)
        statement = select(self.model.__table__).where(func.lower(self.model.email) == normalized)
        try:
            rows = await self._pool.query(statement)
        except DatabaseError as e:
            logger.error(f"[{self.entity.upper()}] Lookup by email failed: {type(e).__name__}")
            raise RecordLookupError(self.entity) from e
        if not rows:
            return None
        return self._to_profile(rows[0])

    async def create_if_absent(self, email: str, build: Callable[[], Awaitable[RecordT]]) -> CreateResult:
        """Create a record unless the email is taken.

        ``build`` runs only after the pre-check passed, so a conflicting
        request never pays for hashing. Exceptions raised by ``build``
        propagate unchanged.

        Args:
            email: Email to reserve (normalized here)
            build: Coroutine factory producing the record to insert

        Returns:
            Created with the new id, AlreadyExists from either uniqueness
            layer, or Failed wrapping the repository error
        """
        normalized = normalize_email(email)
        try:
            if await self.check_email_exists(normalized):
                return AlreadyExists(normalized)
            record = await build()
            record_id = await self.create(record)
        except EmailAlreadyRegisteredError:
            return AlreadyExists(normalized)
        except RegistrationError as e:
            return Failed(e)
        return Created(record_id)
