from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Float, Index, String, Text, func
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all database models."""


class Player(Base):
    """Registered player account.

    Stores:
    - Identity: first_name, last_name, email (unique, stored lowercase)
    - Credentials: password_hash (bcrypt)
    - Athletics: sex, sport, position, gpa, scholarship_amount, test_scores
    - Location: country plus state (USA) or region (elsewhere)
    """

    __tablename__ = "players"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String, nullable=False)
    sex: Mapped[str] = mapped_column(String(10), nullable=False)
    sport: Mapped[str] = mapped_column(String, nullable=False)
    position: Mapped[str] = mapped_column(String, nullable=False)
    gpa: Mapped[float] = mapped_column(Float, nullable=False)
    country: Mapped[str] = mapped_column(String, nullable=False)
    state: Mapped[str | None] = mapped_column(String, nullable=True)
    region: Mapped[str | None] = mapped_column(String, nullable=True)
    scholarship_amount: Mapped[float | None] = mapped_column(Float, nullable=True)
    test_scores: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)


class Coach(Base):
    """Registered coach account.

    Registration maps its payload onto the wider coaches table:
    - sport: primary (first) sport
    - specializations: every sport, in submission order
    - coaching_level: coaching category (mens / womens)
    - current_organization: university
    - country: always USA at registration time
    """

    __tablename__ = "coaches"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String, nullable=False)
    sport: Mapped[str] = mapped_column(String, nullable=False)
    coaching_level: Mapped[str] = mapped_column(String(20), nullable=False)
    current_organization: Mapped[str] = mapped_column(String(255), nullable=False)
    specializations: Mapped[list[str]] = mapped_column(
        ARRAY(String).with_variant(JSON(), "sqlite"),
        nullable=False,
    )
    country: Mapped[str] = mapped_column(String, nullable=False, default="USA")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)


# Lookups compare lower(email); these indexes also make that comparison unique.
Index("uq_players_email_lower", func.lower(Player.email), unique=True)
Index("uq_coaches_email_lower", func.lower(Coach.email), unique=True)
