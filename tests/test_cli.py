import json
from contextlib import contextmanager
from pathlib import Path

import pytest

from exam_api import cli, database


@pytest.fixture()
def cli_db(monkeypatch, engine, db):
    @contextmanager
    def _scope():
        yield db

    monkeypatch.setattr(database, "init_db", lambda: database.Base.metadata.create_all(bind=engine))
    monkeypatch.setattr(database, "session_scope", _scope)
    return db


def test_parse_args_defaults() -> None:
    args = cli.parse_args(["leaderboard"])
    assert args.command == "leaderboard"
    assert args.limit == 50
    assert args.student == 0

    serve = cli.parse_args(["serve", "--port", "9000"])
    assert serve.host == "127.0.0.1"
    assert serve.port == 9000


def test_parse_args_requires_command() -> None:
    with pytest.raises(SystemExit):
        cli.parse_args([])


def test_import_paper_and_leaderboard(tmp_path: Path, cli_db, capsys, make_student, complete_attempt) -> None:
    paper_file = tmp_path / "paper.json"
    paper_file.write_text(
        json.dumps(
            {
                "title": "Геометрия",
                "paymentType": "free",
                "questions": [
                    {"question": "Углы треугольника", "answers": ["180", "360"], "correctIndexes": [0]},
                ],
            },
            ensure_ascii=False,
        ),
        encoding="utf-8",
    )

    cli.main(["import-paper", str(paper_file)])
    assert "Imported paper" in capsys.readouterr().out

    from exam_api.models.db import Paper

    paper = cli_db.query(Paper).filter(Paper.paper_title == "Геометрия").one()
    student = make_student("Ada")
    complete_attempt(student, paper, {0: [0]})

    cli.main(["leaderboard", "--limit", "5"])
    out = capsys.readouterr().out
    assert "Ada" in out
    assert "5.0 coins" in out
