from __future__ import annotations
from typing import Any, Optional
import datetime as dt
import json

from ..errors import StoredPayloadError


def normalize_whitespace(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    compact = " ".join(value.strip().split())
    return compact or None


def normalize_email(email: str) -> str:
    return email.strip().lower()


def to_utc(value: dt.datetime) -> dt.datetime:
    """Aware datetimes are shifted to UTC; naive ones are taken as UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)


def dump_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"))


def load_json(raw: Optional[str], what: str) -> Any:
    if raw is None or raw == "":
        return None
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise StoredPayloadError(f"Stored {what} is not valid JSON") from exc
