"""
Pytest configuration and shared fixtures.
"""

import json
from datetime import date
from pathlib import Path
from typing import Any, Dict, List

import pytest

from dupcheck.logger import get_logger, reset_logger
from dupcheck.schema import Candidate


@pytest.fixture(autouse=True)
def quiet_logger():
    """Fresh global logger per test, without console or file output."""
    reset_logger()
    get_logger(enable_console=False, enable_file=False)
    yield
    reset_logger()


@pytest.fixture
def world_cup_pool() -> List[Candidate]:
    """Pool from the world cup example: one duplicate, one unrelated question."""
    return [
        Candidate(
            id="q-wm",
            title="Wird Deutschland 2026 Fußball-Weltmeister?",
            closes_at=date(2026, 7, 19),
            status="open",
        ),
        Candidate(
            id="q-inflation",
            title="Steigt die Inflation 2026?",
            closes_at=date(2026, 12, 31),
            status="open",
        ),
    ]


@pytest.fixture
def question_rows() -> List[Dict[str, Any]]:
    """Raw question rows as exported from the hosted question table."""
    return [
        {
            "id": "q1",
            "title": "Wird Deutschland 2026 Fußball-Weltmeister?",
            "closes_at": "2026-07-19",
            "status": "open",
            "visibility": "public",
            "created_at": "2026-01-10T09:00:00Z",
        },
        {
            "id": "q2",
            "title": "Kommt die CO2-Steuer 2027?",
            "closes_at": "2025-12-31",
            "status": "resolved",
            "visibility": "public",
            "created_at": "2025-06-01T12:00:00Z",
        },
        {
            "id": "q3",
            "title": "Privat: Heiraten Anna und Ben 2026?",
            "closes_at": "2026-09-01",
            "status": "open",
            "visibility": "private",
            "created_at": "2026-02-01T08:00:00Z",
        },
        {
            "id": "q4",
            "title": "Steigt die Inflation 2026 über 3 Prozent?",
            "closes_at": "2026-12-31",
            "status": "open",
            "visibility": "public",
            "created_at": "2026-03-01T08:00:00Z",
            "deleted_at": "2026-03-02T10:00:00Z",
        },
    ]


@pytest.fixture
def questions_file(tmp_path, question_rows) -> Path:
    """JSON export with sample questions."""
    path = tmp_path / "questions.json"
    path.write_text(json.dumps(question_rows, ensure_ascii=False), encoding="utf-8")
    return path
