"""Tests for CLI argument parsing and the offline subcommands."""

from datetime import datetime
from pathlib import Path
from textwrap import dedent
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from main import main, parse_args
from src.core.db import bulk_upsert_scholarships, init_db
from src.core.schemas import Scholarship, ScrapeRunResult
from src.pipeline.status_store import UserStatusStore
from src.pipeline.store_sync import to_document


def _write_settings(tmp_path: Path) -> Path:
    config = tmp_path / "settings.yaml"
    config.write_text(dedent(f"""\
        sources:
          - id: umich
            display_name: UMich
            base_url: https://umich.academicworks.com
          - id: osu
            display_name: Ohio State
            base_url: https://osu.academicworks.com
        store:
          path: {tmp_path / "store.db"}
        cache:
          path: {tmp_path / "cache.json"}
    """))
    return config


def _populate(tmp_path: Path, scholarships: list[Scholarship]) -> None:
    conn = init_db(tmp_path / "store.db")
    now = datetime.now()
    bulk_upsert_scholarships(conn, [to_document(s, now) for s in scholarships])  # type: ignore[misc]
    conn.close()


def _scholarship(sid: str, name: str, amount: int, **kw: object) -> Scholarship:
    defaults: dict[str, object] = {
        "id": sid,
        "source_id": "umich",
        "name": name,
        "provider": "UMich External Opportunities",
        "amount": amount,
        "deadline": "2027-03-01",
        "url": f"https://umich.academicworks.com/opportunities/{sid}",
    }
    defaults.update(kw)
    return Scholarship(**defaults)  # type: ignore[arg-type]


CATALOG = [
    _scholarship("a", "Alpha Engineering Award", 1000, description="For engineering majors."),
    _scholarship("b", "Bravo Family Award", 5000),
    _scholarship("c", "Charlie Nursing Grant", 2500),
    _scholarship("d", "Delta Robotics Award", 500),
]


class TestParseArgs:
    def test_sync_flags(self) -> None:
        args = parse_args(["sync", "--batch-size", "3", "--max-pages", "2",
                           "--source", "umich", "--dry-run", "--export", "json"])
        assert args.command == "sync"
        assert args.batch_size == 3
        assert args.max_pages == 2
        assert args.sources == ["umich"]
        assert args.dry_run is True
        assert args.export == "json"
        assert args.config == "config/settings.yaml"

    def test_list_defaults(self) -> None:
        args = parse_args(["list"])
        assert args.page == 1
        assert args.page_size == 20
        assert args.user is None
        assert args.show == "available"
        assert args.sort is None
        assert args.search is None

    def test_list_rejects_unknown_sort(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["list", "--sort", "newest"])

    def test_status_set(self) -> None:
        args = parse_args(["status", "set", "--user", "u1", "abc", "applied"])
        assert args.status_command == "set"
        assert args.scholarship_id == "abc"
        assert args.status == "applied"

    def test_status_rejects_unknown_value(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["status", "set", "--user", "u1", "abc", "saved"])

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            parse_args([])


class TestSyncDryRun:
    def test_lists_sources(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        config = _write_settings(tmp_path)
        main(["sync", "--config", str(config), "--dry-run", "--batch-size", "1"])

        out = capsys.readouterr().out
        assert "2 sources in 2 batches" in out
        assert "'umich' UMich" in out
        assert not (tmp_path / "store.db").exists()

    def test_unknown_source_exits(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        config = _write_settings(tmp_path)
        with pytest.raises(SystemExit) as exc_info:
            main(["sync", "--config", str(config), "--dry-run", "--source", "nope"])

        assert exc_info.value.code == 1
        assert "Unknown source id(s): nope" in capsys.readouterr().err


class TestStatusCommands:
    def test_set_then_list(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        config = _write_settings(tmp_path)
        main(["status", "set", "--config", str(config), "--user", "u1", "abc", "applied"])
        main(["status", "set", "--config", str(config), "--user", "u1", "def", "hidden"])
        main(["status", "list", "--config", str(config), "--user", "u1", "--status", "hidden"])

        out = capsys.readouterr().out
        assert "Marked abc as applied" in out
        assert "hidden\tdef" in out
        assert "applied\tabc" not in out

        conn = init_db(tmp_path / "store.db")
        assert UserStatusStore(conn).get_all_statuses("u1") == {"abc": "applied", "def": "hidden"}
        conn.close()

    def test_clear_missing(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        config = _write_settings(tmp_path)
        main(["status", "clear", "--config", str(config), "--user", "u1", "abc"])
        assert "No status recorded for abc" in capsys.readouterr().out


class TestPurgeCommand:
    def test_empty_store(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        config = _write_settings(tmp_path)
        main(["purge", "--config", str(config), "--older-than-days", "7"])
        assert "Purged 0 listings not refreshed in 7 days" in capsys.readouterr().out


class TestEssayCommand:
    def test_unknown_scholarship_exits(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        config = _write_settings(tmp_path)
        with pytest.raises(SystemExit) as exc_info:
            main(["essay", "--config", str(config), "missing-id", "--question", "Why?"])

        assert exc_info.value.code == 1
        assert "Scholarship 'missing-id' not found" in capsys.readouterr().err


class TestConfigErrors:
    def test_invalid_config_exits(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        config = tmp_path / "settings.yaml"
        config.write_text("scrape:\n  batch_size: 0\n")
        with pytest.raises(SystemExit) as exc_info:
            main(["purge", "--config", str(config)])

        assert exc_info.value.code == 1
        assert "Error loading config" in capsys.readouterr().err


class TestListCommand:
    def test_available_hides_marked(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        config = _write_settings(tmp_path)
        _populate(tmp_path, CATALOG)
        main(["status", "set", "--config", str(config), "--user", "u1", "a", "applied"])
        main(["status", "set", "--config", str(config), "--user", "u1", "c", "hidden"])
        capsys.readouterr()

        main(["list", "--config", str(config), "--user", "u1"])

        out = capsys.readouterr().out
        assert "(4 total, from store; 2 shown)" in out
        assert "Bravo Family Award" in out
        assert "Delta Robotics Award" in out
        assert "Alpha Engineering Award" not in out
        assert "Charlie Nursing Grant" not in out

    def test_search_by_name(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        config = _write_settings(tmp_path)
        _populate(tmp_path, CATALOG)

        main(["list", "--config", str(config), "--search", "AWARD"])

        out = capsys.readouterr().out
        assert "3 shown" in out
        assert "Charlie Nursing Grant" not in out

    def test_sort_amount_high(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        config = _write_settings(tmp_path)
        _populate(tmp_path, CATALOG)

        main(["list", "--config", str(config), "--sort", "amount-high"])

        out = capsys.readouterr().out
        positions = [out.index(s.name) for s in (CATALOG[1], CATALOG[2], CATALOG[0], CATALOG[3])]
        assert positions == sorted(positions)

    def test_sort_relevance_uses_quiz_answers(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        config = _write_settings(tmp_path)
        _populate(tmp_path, CATALOG)
        profile = tmp_path / "student.yaml"
        profile.write_text("quiz_answers:\n  primary_hobby: robotics\n")

        main(["list", "--config", str(config), "--sort", "relevance", "--profile", str(profile)])

        out = capsys.readouterr().out
        assert out.index("Delta Robotics Award") < out.index("Alpha Engineering Award")

    def test_show_applied_loads_full_records(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        config = _write_settings(tmp_path)
        _populate(tmp_path, CATALOG)
        main(["status", "set", "--config", str(config), "--user", "u1", "b", "applied"])
        main(["status", "set", "--config", str(config), "--user", "u1", "c", "hidden"])
        capsys.readouterr()

        main(["list", "--config", str(config), "--user", "u1", "--show", "applied"])

        out = capsys.readouterr().out
        assert "1 applied scholarships for u1" in out
        assert "Bravo Family Award [applied]" in out
        assert "Charlie Nursing Grant" not in out

    def test_show_hidden_requires_user(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        config = _write_settings(tmp_path)
        with pytest.raises(SystemExit) as exc_info:
            main(["list", "--config", str(config), "--show", "hidden"])

        assert exc_info.value.code == 1
        assert "--show hidden requires --user" in capsys.readouterr().err


class TestStatusListDetails:
    def test_prints_name_and_link(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        config = _write_settings(tmp_path)
        _populate(tmp_path, CATALOG)
        main(["status", "set", "--config", str(config), "--user", "u1", "b", "applied"])
        main(["status", "set", "--config", str(config), "--user", "u1", "gone", "hidden"])
        main(["status", "list", "--config", str(config), "--user", "u1"])

        out = capsys.readouterr().out
        assert "applied\tb\tBravo Family Award | https://umich.academicworks.com/opportunities/b" in out
        assert "hidden\tgone\t(no longer listed)" in out


class TestSyncOptions:
    def test_source_lookup_is_case_insensitive_and_deduplicated(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        config = _write_settings(tmp_path)
        main(["sync", "--config", str(config), "--dry-run", "--source", "OSU", "--source", "osu"])

        out = capsys.readouterr().out
        assert "1 sources in 1 batches" in out
        assert "'osu' Ohio State" in out
        assert "'umich'" not in out

    def test_clear_cache_after_sync(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        config = _write_settings(tmp_path)
        cache_file = tmp_path / "cache.json"
        cache_file.write_text("{}")
        now = datetime.now()
        scrape = AsyncMock(return_value=ScrapeRunResult(started_at=now, finished_at=now))

        with patch("main.HttpSession", MagicMock()), patch("main.run_scrape", scrape):
            main(["sync", "--config", str(config), "--clear-cache"])

        assert not cache_file.exists()
        assert f"Cleared local cache {cache_file}" in capsys.readouterr().out
