from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class KeyValueMixin:
    """One row per stored object: an opaque key and the object's JSON body."""

    key: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
    )

    value: Mapped[dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
    )

    # Tracking
    stored_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )
