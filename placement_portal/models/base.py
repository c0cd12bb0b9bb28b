from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Enum
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp; every DateTime column stores UTC without tzinfo."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def enum_column(enum_cls, **kwargs) -> Column:
    """String-backed column that loads values back as `enum_cls` members."""
    return Column(
        Enum(
            enum_cls,
            native_enum=False,
            values_callable=lambda members: [m.value for m in members],
            validate_strings=True,
        ),
        **kwargs
    )


class TimestampMixin:
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
