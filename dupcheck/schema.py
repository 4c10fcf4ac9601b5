import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from .logger import get_logger

OPTIONAL_STR_FIELDS = ["status", "visibility"]


@dataclass(frozen=True)
class Candidate:
    """An existing question the draft title is compared against."""

    id: str
    title: str
    closes_at: Optional[date] = None
    status: Optional[str] = None

    def is_complete(self) -> bool:
        return _is_non_empty_id(self.id) and _is_non_empty_str(self.title)


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _is_non_empty_id(v: Any) -> bool:
    if isinstance(v, bool):
        return False
    if isinstance(v, int):
        return True
    return _is_non_empty_str(v)


_FRACTION_RE = re.compile(r"\.(\d+)")
_COMPACT_OFFSET_RE = re.compile(r"([+-]\d{2})(\d{2})$")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Coerce a timestamp from a database row or REST payload into a ``datetime``.

    Postgres emits a variable number of fractional-second digits
    (``2026-01-10T09:00:00.12345+00:00``); they are padded or cut to
    microseconds. A trailing ``Z`` and compact offsets (``+0000``) are
    accepted. Returns None for empty values.

    Raises:
        ValueError: If the value cannot be read as a timestamp
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        raise ValueError(f"Unsupported timestamp value: {value!r}")

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    if len(text) > 10:
        text = _COMPACT_OFFSET_RE.sub(r"\1:\2", text)
    return datetime.fromisoformat(text)


def parse_date(value: Any) -> Optional[date]:
    """
    Coerce a closing date from a database row into a ``date``.

    Accepts ``date``/``datetime`` objects and ISO strings such as
    ``2026-07-19`` or ``2026-07-19T12:00:00Z``. Returns None for empty values.

    Raises:
        ValueError: If the value cannot be read as a date
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Blank date value")
        try:
            return parse_timestamp(text).date()
        except ValueError:
            # Fall back to the leading calendar date of longer timestamps
            return date.fromisoformat(text[:10])
    raise ValueError(f"Unsupported date value: {value!r}")


def validate_candidate(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    """
    errors: List[str] = []

    if not isinstance(data, dict):
        return ["Candidate row must be an object"]

    if "id" not in data or data["id"] is None:
        errors.append("Missing required field: id")
    elif not _is_non_empty_id(data["id"]):
        errors.append("Field 'id' must be a non-empty string or integer")

    if "title" not in data or data["title"] is None:
        errors.append("Missing required field: title")
    elif not _is_non_empty_str(data["title"]):
        errors.append("Field 'title' must be a non-empty string")

    for f in OPTIONAL_STR_FIELDS:
        if data.get(f) is not None and not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string if provided")

    try:
        parse_date(data.get("closes_at"))
    except ValueError:
        errors.append("Field 'closes_at' must be an ISO date if provided")

    return errors


def candidate_from_row(row: Dict[str, Any]) -> Candidate:
    """
    Convert a validated database/API row into a Candidate.

    Raises:
        ValueError: If the row fails validation
    """
    errors = validate_candidate(row)
    if errors:
        raise ValueError("; ".join(errors))
    return Candidate(
        id=str(row["id"]),
        title=row["title"],
        closes_at=parse_date(row.get("closes_at")),
        status=row.get("status"),
    )


def candidates_from_rows(rows: Iterable[Dict[str, Any]]) -> List[Candidate]:
    """Convert rows in order, skipping (and logging) malformed ones."""
    candidates: List[Candidate] = []
    for index, row in enumerate(rows):
        try:
            candidates.append(candidate_from_row(row))
        except ValueError as e:
            row_id = row.get("id") if isinstance(row, dict) else None
            get_logger().warning("Skipping invalid candidate row", index=index, id=row_id, error=str(e))
    return candidates
