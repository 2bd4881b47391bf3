# utils/timezone.py
"""
Política de timezone: tudo é gravado e comparado em UTC (timezone-aware).

SQLite devolve datetimes naive mesmo quando a coluna é timezone=True,
por isso qualquer comparação com "agora" deve passar por ensure_utc().
"""

from datetime import datetime, timezone
from typing import Optional

UTC = timezone.utc


def now_utc() -> datetime:
    """Retorna o datetime atual em UTC (timezone-aware)."""
    return datetime.now(UTC)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Normaliza um datetime para UTC.

    Datetimes naive são tratados como UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def to_iso(dt: Optional[datetime]) -> Optional[str]:
    """Serializa como ISO 8601 com offset explícito."""
    dt = ensure_utc(dt)
    return dt.isoformat() if dt else None
