import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .database import Question, init_database, get_session
from .logger import get_logger
from .schema import Candidate, parse_date, parse_timestamp, validate_candidate

TRACKED_FIELDS = ("title", "closes_at", "status", "visibility", "deleted_at")


def load_questions_file(path: Path) -> List[Dict[str, Any]]:
    """Read question rows from a JSON export (a list, or {"questions": [...]})."""
    with path.open("r", encoding="utf-8") as f:
        content = f.read().strip()
    if not content:
        return []
    data = json.loads(content)
    if isinstance(data, dict):
        data = data.get("questions", [])
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of questions in {path}")
    return data


def _parse_timestamp(value: Any) -> Optional[datetime]:
    ts = parse_timestamp(value)
    # SQLite stores naive timestamps
    return ts.replace(tzinfo=None) if ts is not None else None


def _row_values(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "title": row["title"],
        "closes_at": parse_date(row.get("closes_at")),
        "status": row.get("status"),
        "visibility": row.get("visibility") or "public",
        "deleted_at": _parse_timestamp(row.get("deleted_at")),
    }


def diff_fields(old: Question, new: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    changed = {}
    for k in TRACKED_FIELDS:
        ov = getattr(old, k)
        nv = new.get(k)
        if ov != nv:
            changed[k] = {"old": ov, "new": nv}
    return changed


def save_questions(db_path: Path, rows: Iterable[Dict[str, Any]]) -> Dict[str, int]:
    """
    Upsert question rows into the local store.

    Args:
        db_path: Path to SQLite database file
        rows: Raw question rows (id, title, closes_at, status, visibility,
            created_at, deleted_at)

    Returns:
        Counts by outcome: new, updated, unchanged, invalid
    """
    logger = get_logger()
    init_database(db_path)
    session = get_session(db_path)
    counts = {"new": 0, "updated": 0, "unchanged": 0, "invalid": 0}

    try:
        for row in rows:
            errors = validate_candidate(row)
            if not errors:
                try:
                    values = _row_values(row)
                    created_at = _parse_timestamp(row.get("created_at"))
                except ValueError as e:
                    errors = [str(e)]
            if errors:
                counts["invalid"] += 1
                logger.warning("Skipping invalid question", id=row.get("id") if isinstance(row, dict) else None, errors=errors)
                continue

            question_id = str(row["id"])
            existing = session.get(Question, question_id)
            if existing is None:
                question = Question(id=question_id, **values)
                if created_at is not None:
                    question.created_at = created_at
                session.add(question)
                counts["new"] += 1
                continue

            changed = diff_fields(existing, values)
            if changed:
                for k, v in changed.items():
                    setattr(existing, k, v["new"])
                counts["updated"] += 1
                logger.debug("Question updated", id=question_id, changed=sorted(changed))
            else:
                counts["unchanged"] += 1

        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

    logger.info("Questions saved", db=str(db_path), **counts)
    return counts


def list_questions(db_path: Path, limit: Optional[int] = None) -> List[Question]:
    """All stored questions, newest first (including private and deleted)."""
    session = get_session(db_path)
    try:
        query = session.query(Question).order_by(Question.created_at.desc())
        if limit is not None:
            query = query.limit(limit)
        return query.all()
    finally:
        session.close()


def load_candidate_pool(db_path: Path, limit: int = 200) -> List[Candidate]:
    """
    Load the candidate pool for the duplicate check.

    Only public questions that are not soft-deleted are considered. Ended and
    archived questions are included so authors get warned about questions
    that were already asked and resolved.

    Args:
        db_path: Path to SQLite database file
        limit: Maximum number of questions, most recent first

    Returns:
        Candidates ordered newest first
    """
    if not db_path.exists():
        raise FileNotFoundError(f"Question database not found: {db_path}")

    session = get_session(db_path)
    try:
        rows = (
            session.query(Question)
            .filter(Question.visibility == "public")
            .filter(Question.deleted_at.is_(None))
            .order_by(Question.created_at.desc())
            .limit(limit)
            .all()
        )
        return [
            Candidate(id=q.id, title=q.title, closes_at=q.closes_at, status=q.status)
            for q in rows
        ]
    finally:
        session.close()
