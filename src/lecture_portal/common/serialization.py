from __future__ import annotations

from dataclasses import fields, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable


def to_jsonable(value: Any, *, exclude: Iterable[str] = ()) -> Any:
    """Convert domain dataclasses (and containers of them) into JSON-friendly data."""
    if is_dataclass(value) and not isinstance(value, type):
        skip = set(exclude)
        return {f.name: to_jsonable(getattr(value, f.name)) for f in fields(value) if f.name not in skip}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v, exclude=exclude) for v in value]
    return value
