"""Tests for the management CLI."""

import json
from pathlib import Path

import pytest

import manage
from facturier.config import reset_settings


@pytest.fixture(params=["sqlite", "json"])
def cli_env(request: pytest.FixtureRequest, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Point the CLI at a fresh data directory."""
    monkeypatch.setenv("STORAGE_BACKEND", request.param)
    monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path / "data"))
    reset_settings()
    yield request.param
    reset_settings()


@pytest.fixture
def backup_file(tmp_path: Path) -> Path:
    party = {
        "seller_name": "Atelier Martin",
        "seller_siret": "73282932000074",
        "seller_address": "4 quai des Chartrons, 33000 Bordeaux",
        "buyer_name": "Boulangerie Dupont",
        "buyer_address": "12 rue des Lilas, 75011 Paris",
        "client_id": 3,
    }
    payload = {
        "version": 1,
        "exported_at": "2026-04-01T10:00:00Z",
        "settings": {
            "business_name": "Atelier Martin",
            "siret": "73282932000074",
            "address": "4 quai des Chartrons",
            "postal_code": "33000",
            "city": "Bordeaux",
        },
        "clients": [
            {
                "id": 3,
                "company_name": "Boulangerie Dupont",
                "address": "12 rue des Lilas",
                "postal_code": "75011",
                "city": "Paris",
            }
        ],
        "invoices": [
            {
                **party,
                "id": 1,
                "invoice_number": "F-2026-0001",
                "issue_date": "2026-03-15",
                "due_date": "2026-04-14",
                "total_ht": 500.0,
                "total_ttc": 500.0,
                "status": "sent",
            },
            {
                **party,
                "id": 2,
                "invoice_number": "F-2026-0002",
                "issue_date": "2026-03-20",
                "due_date": "2026-04-19",
                "status": "draft",
            },
        ],
        "quotes": [],
    }
    path = tmp_path / "backup.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


class TestBackupCommands:
    def test_restore_then_backup(self, cli_env, backup_file: Path, tmp_path: Path, capsys):
        manage.main(["restore", str(backup_file)])
        assert "Restored 1 clients, 2 invoices, 0 quotes" in capsys.readouterr().out

        out_path = tmp_path / "out.json"
        manage.main(["backup", str(out_path)])

        data = json.loads(out_path.read_text(encoding="utf-8"))
        assert data["settings"]["business_name"] == "Atelier Martin"
        assert [c["id"] for c in data["clients"]] == [3]
        assert sorted(inv["invoice_number"] for inv in data["invoices"]) == [
            "F-2026-0001",
            "F-2026-0002",
        ]

    def test_restore_invalid_file_exits(self, cli_env, tmp_path: Path, capsys):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(SystemExit) as exc_info:
            manage.main(["restore", str(path)])

        assert exc_info.value.code == 1
        assert "not valid JSON" in capsys.readouterr().err


class TestExportCsvCommand:
    def test_export_with_status(self, cli_env, backup_file: Path, tmp_path: Path, capsys):
        manage.main(["restore", str(backup_file)])
        out_path = tmp_path / "factures.csv"

        manage.main(["export-csv", str(out_path), "--status", "sent"])

        assert "1 invoices exported" in capsys.readouterr().out
        raw = out_path.read_bytes()
        assert raw.startswith(b"\xef\xbb\xbf")
        rows = raw.decode("utf-8-sig").split("\r\n")
        assert rows[1].startswith("F-2026-0001;15/03/2026")
        assert "F-2026-0002" not in raw.decode("utf-8-sig")

    def test_unknown_status_rejected(self, cli_env, tmp_path: Path):
        with pytest.raises(SystemExit) as exc_info:
            manage.main(["export-csv", str(tmp_path / "x.csv"), "--status", "lost"])
        assert exc_info.value.code == 2


class TestMigrationCommands:
    def test_migrate_and_status(self, cli_env, capsys):
        manage.main(["migrate"])
        migrate_out = capsys.readouterr().out
        manage.main(["status"])
        status_out = capsys.readouterr().out

        if cli_env == "json":
            assert "has no migrations" in migrate_out
            assert "has no migrations" in status_out
        else:
            assert "001_initial: ok" in migrate_out
            assert "Pending: none" in status_out
