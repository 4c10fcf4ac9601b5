import argparse
import json
from datetime import date
from pathlib import Path

from . import __version__
from .config import load_config, load_env
from .matcher import rank, score_candidates
from .remote import fetch_candidate_pool
from .schema import validate_candidate
from .storage import list_questions, load_candidate_pool, load_questions_file, save_questions

DEFAULT_DB = "data/questions.db"


def _load_pool(args: argparse.Namespace, limit: int):
    if args.remote:
        try:
            return fetch_candidate_pool(limit=limit)
        except ValueError as e:
            raise SystemExit(str(e))
    db_path = Path(args.db)
    if not db_path.exists():
        raise SystemExit(f"Question database not found: {db_path}. Run 'dupcheck import' first or use --remote.")
    return load_candidate_pool(db_path, limit=limit)


def cmd_check(args: argparse.Namespace) -> None:
    try:
        config = load_config()
    except ValueError as e:
        raise SystemExit(f"Invalid configuration: {e}")

    today = None
    if args.today:
        try:
            today = date.fromisoformat(args.today)
        except ValueError:
            raise SystemExit(f"Invalid --today date (expected YYYY-MM-DD): {args.today}")

    pool = _load_pool(args, config.pool_limit)
    matches = rank(args.query, pool, today=today, config=config)

    if args.json:
        print(json.dumps({"ok": True, "matches": [m.to_dict() for m in matches]}, ensure_ascii=False, indent=2))
        return

    if not matches:
        print("No likely duplicates found.")
        return
    print(f"{len(matches)} possible duplicate(s) among {len(pool)} questions:")
    for m in matches:
        state = "ended" if m.ended else "active"
        status = f", {m.status}" if m.status else ""
        print(f" {m.score:3d}%  [{state}{status}] {m.title}  (id={m.id})")

    if args.explain:
        print("\nScore breakdown (token / trigram):")
        for s in score_candidates(args.query, pool, config)[:config.max_matches]:
            print(f" {s.token_score:.3f} / {s.dice_score:.3f}  {s.candidate.title}")


def cmd_import(args: argparse.Namespace) -> None:
    input_path = Path(args.input)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    try:
        rows = load_questions_file(input_path)
    except (json.JSONDecodeError, ValueError) as e:
        raise SystemExit(f"Could not read questions from {input_path}: {e}")

    counts = save_questions(Path(args.db), rows)
    print(
        f"Done. new={counts['new']} updated={counts['updated']} "
        f"no-change={counts['unchanged']} invalid={counts['invalid']}"
    )


def cmd_validate(args: argparse.Namespace) -> None:
    input_path = Path(args.input)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    try:
        rows = load_questions_file(input_path)
    except (json.JSONDecodeError, ValueError) as e:
        raise SystemExit(f"Could not read questions from {input_path}: {e}")

    invalid = 0
    for index, row in enumerate(rows):
        errors = validate_candidate(row)
        if errors:
            invalid += 1
            label = row.get("id") if isinstance(row, dict) else None
            print(f"Row {index} (id={label}):")
            for e in errors:
                print(f" - {e}")
    if invalid:
        print(f"Invalid: {invalid} of {len(rows)} rows")
        raise SystemExit(2)
    print(f"Valid ({len(rows)} rows)")


def cmd_list(args: argparse.Namespace) -> None:
    db_path = Path(args.db)
    if not db_path.exists():
        print(f"Database not found: {db_path}")
        return
    questions = list_questions(db_path, limit=args.limit)
    if not questions:
        print("No questions in database.")
        return
    print(f"Found {len(questions)} questions in {db_path}:\n")
    for q in questions:
        print(f"ID: {q.id}")
        print(f"  Title: {q.title}")
        print(f"  Closes: {q.closes_at.isoformat() if q.closes_at else '-'}")
        print(f"  Status: {q.status or '-'}")
        print(f"  Visibility: {q.visibility}{' (deleted)' if q.deleted_at else ''}")
        print()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dupcheck", description="Find likely duplicate prediction-market questions")
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")
    chk = subparsers.add_parser("check", help="Check a draft question title against existing questions")
    chk.add_argument("--query", required=True, help="Draft question title")
    chk.add_argument("--db", default=DEFAULT_DB, help=f"Path to SQLite question store (default: {DEFAULT_DB})")
    chk.add_argument("--remote", action="store_true", help="Fetch the candidate pool from SUPABASE_URL instead of --db")
    chk.add_argument("--today", help="Reference date YYYY-MM-DD for the ended flag (default: today)")
    chk.add_argument("--json", action="store_true", help="Print the API response JSON")
    chk.add_argument("--explain", action="store_true", help="Show token and trigram scores")
    chk.set_defaults(func=cmd_check)

    imp = subparsers.add_parser("import", help="Import questions from a JSON export into the local store")
    imp.add_argument("--input", required=True, help="JSON file with a list of questions")
    imp.add_argument("--db", default=DEFAULT_DB, help=f"Path to SQLite question store (default: {DEFAULT_DB})")
    imp.set_defaults(func=cmd_import)

    val = subparsers.add_parser("validate", help="Validate a questions JSON export")
    val.add_argument("--input", required=True, help="JSON file with a list of questions")
    val.set_defaults(func=cmd_validate)

    lst = subparsers.add_parser("list", help="List stored questions")
    lst.add_argument("--db", default=DEFAULT_DB, help=f"Path to SQLite question store (default: {DEFAULT_DB})")
    lst.add_argument("--limit", type=int, help="Show at most N questions")
    lst.set_defaults(func=cmd_list)

    return parser


def main(argv=None):
    # Load .env if present (SUPABASE_URL, DUPCHECK_* thresholds, etc.)
    load_env()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if hasattr(args, "func"):
        args.func(args)
        return

    parser.print_help()


if __name__ == "__main__":
    main()
