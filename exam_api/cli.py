import argparse
import json
from pathlib import Path

from exam_api.config import LEADERBOARD_DEFAULT_LIMIT, LOG_LEVEL
from exam_api.logging_setup import setup_console_logging

setup_console_logging(LOG_LEVEL)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Paper attempts service")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    sub.add_parser("init-db", help="Create database tables")

    importer = sub.add_parser("import-paper", help="Import a paper from a JSON file")
    importer.add_argument("file", type=Path, help="Path to paper JSON")

    board = sub.add_parser("leaderboard", help="Print the current standings")
    board.add_argument("--limit", type=int, default=LEADERBOARD_DEFAULT_LIMIT)
    board.add_argument(
        "--student",
        type=int,
        default=0,
        help="Student id to report as 'me'",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    if args.command == "serve":
        import uvicorn

        uvicorn.run("exam_api.app:app", host=args.host, port=args.port, log_level="info")
        return

    from exam_api.database import init_db, session_scope

    init_db()
    if args.command == "init-db":
        print("Database initialized")
        return

    with session_scope() as db:
        if args.command == "import-paper":
            from exam_api.services.catalog_service import import_paper

            payload = json.loads(args.file.read_text(encoding="utf-8"))
            paper = import_paper(db, payload)
            print(f"Imported paper {paper.id}: {paper.paper_title}")
        elif args.command == "leaderboard":
            from exam_api.services.leaderboard_service import get_leaderboard

            board = get_leaderboard(db, args.student, args.limit)
            for row in board["top"]:
                print(
                    f"{row['rank']:>4}  {row['name']:<30} "
                    f"{row['totalCoins']:>10} coins  {row['totalFinishedExams']:>4} exams"
                )


if __name__ == "__main__":
    main()
