"""Literal value typing helpers shared by the loader and the term translator."""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Optional

from ..core.types import (
    NUMERIC_TYPES,
    TEMPORAL_TYPES,
    XSD_BOOLEAN,
    XSD_DATE,
    XSD_DATE_TIME,
    XSD_DECIMAL,
    XSD_INTEGER,
    XSD_STRING,
)

DATETIME_REGEX = re.compile(
    r"^-?[0-9]{4,}-[0-9][0-9]-[0-9][0-9]"
    r"(T[0-9][0-9](:[0-9][0-9])?(:[0-9][0-9])?([.][0-9]+)?Z?)?$"
)
NUMBER_REGEX = re.compile(r"^[-+]?([0-9]+([.][0-9]*)?|[.][0-9]+)([eE][-+]?[0-9]+)?$")


def is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    return isinstance(value, str) and NUMBER_REGEX.match(value.strip()) is not None


def is_datetime(value: Any) -> bool:
    if isinstance(value, (date, datetime)):
        return True
    return isinstance(value, str) and DATETIME_REGEX.match(value.strip()) is not None


def guess_datatype(value: Any) -> str:
    """Guess the XSD datatype of a Python value."""
    if isinstance(value, bool):
        return XSD_BOOLEAN
    if isinstance(value, int):
        return XSD_INTEGER
    if isinstance(value, float):
        return XSD_DECIMAL
    if isinstance(value, datetime):
        return XSD_DATE_TIME
    if isinstance(value, date):
        return XSD_DATE
    return XSD_STRING


def to_text(value: Any) -> str:
    """Serialize a value the way it is stored in the value column."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def numeric_value(value: Any) -> Optional[float]:
    """Return the numeric representation of a value, or None."""
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, str) and value.strip() in ("true", "false"):
        return 1.0 if value.strip() == "true" else 0.0
    if is_number(value):
        return float(value)
    return None


def temporal_value(value: Any) -> Optional[str]:
    """Return a sortable ISO representation of a date/datetime value, or None."""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if is_datetime(value):
        return str(value).strip().rstrip("Z")
    return None


def type_family(datatype: str) -> str:
    """Map a datatype onto the column family it is compared in."""
    if datatype in NUMERIC_TYPES:
        return "number"
    if datatype in TEMPORAL_TYPES:
        return "temporal"
    return "string"
