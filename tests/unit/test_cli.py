"""Unit tests for the command line."""

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from ftpbridge import cli
from ftpbridge.client import BridgeClientError
from ftpbridge.core.civil_time import fixed_offset
from ftpbridge.schemas.files import FileEntry
from tests.fakes import workbook_bytes


def entries():
    return [
        FileEntry(name="Erros", is_directory=True),
        FileEntry(
            name="pedido.csv",
            size=120,
            date_modified=datetime(2024, 6, 14, 2, 59, 59, tzinfo=timezone.utc),
        ),
    ]


@pytest.mark.unit
def test_parser_commands():
    parser = cli.build_parser()

    args = parser.parse_args(["--url", "http://bridge:3000", "list", "today"])
    assert args.url == "http://bridge:3000"
    assert args.which == "today"

    args = parser.parse_args(["watch"])
    assert args.interval == 6.0

    with pytest.raises(SystemExit):
        parser.parse_args(["list", "everything"])


@pytest.mark.unit
def test_format_entries_uses_business_time():
    table = cli.format_entries(entries()).splitlines()

    assert table[0].startswith("dir ")
    assert table[0].rstrip().endswith("-")
    assert "pedido.csv" in table[1]
    assert table[1].endswith("13/06/2024 23:59:59")
    assert cli.format_entries([]) == "(no files)"


@pytest.mark.unit
def test_load_uploads_converts_workbooks(temp_dir):
    (temp_dir / "Lote 1.xlsx").write_bytes(workbook_bytes([["a", "b"], [1, 2]]))
    (temp_dir / "pronto.csv").write_bytes(b"x\r\n")

    uploads = cli.load_uploads(
        [str(temp_dir / "Lote 1.xlsx"), str(temp_dir / "pronto.csv")]
    )

    assert [u.filename for u in uploads] == ["Lote_1.csv", "pronto.csv"]
    assert uploads[0].content == b"a,b\r\n1,2\r\n"
    assert uploads[1].content == b"x\r\n"


@pytest.mark.unit
def test_list_command_prints_table(capsys):
    client = AsyncMock()
    client.list_processed_today.return_value = entries()

    asyncio.run(cli.list_cmd(client, "today"))

    assert "pedido.csv" in capsys.readouterr().out


@pytest.mark.unit
def test_delete_all_asks_for_confirmation(capsys):
    client = AsyncMock()

    with patch("builtins.input", return_value="n"):
        asyncio.run(cli.delete_all_cmd(client, assume_yes=False))

    client.delete_all.assert_not_called()
    assert "Aborted" in capsys.readouterr().out

    client.delete_all.return_value = "All files deleted successfully."
    asyncio.run(cli.delete_all_cmd(client, assume_yes=True))
    client.delete_all.assert_awaited_once()


@pytest.mark.unit
def test_main_reports_api_errors(capsys):
    failure = BridgeClientError(500, "Error deleting file: 550 Delete operation failed.")
    with patch.object(cli, "run_client_command", AsyncMock(side_effect=failure)):
        exit_code = cli.main(["delete", "nao_existe.csv"])

    assert exit_code == 1
    assert "Error deleting file" in capsys.readouterr().err


@pytest.mark.unit
def test_main_reports_missing_files(capsys, temp_dir):
    exit_code = cli.main(["upload", str(temp_dir / "missing.xlsx")])

    assert exit_code == 1
    assert "missing.xlsx" in capsys.readouterr().err


@pytest.mark.unit
def test_format_entries_in_another_offset():
    table = cli.format_entries(entries(), tz=fixed_offset(0)).splitlines()

    assert table[1].endswith("14/06/2024 02:59:59")


@pytest.mark.unit
def test_display_timezone_follows_option_then_environment(monkeypatch):
    parser = cli.build_parser()

    args = parser.parse_args(["--utc-offset", "1", "list", "inbox"])
    assert cli.display_timezone(args).utcoffset(None) == timedelta(hours=1)

    monkeypatch.setenv("BUSINESS_UTC_OFFSET_HOURS", "-5")
    args = parser.parse_args(["list", "inbox"])
    assert cli.display_timezone(args).utcoffset(None) == timedelta(hours=-5)


@pytest.mark.unit
def test_main_reports_unreachable_server(capsys):
    failure = httpx.ConnectError("All connection attempts failed")
    with patch.object(cli, "run_client_command", AsyncMock(side_effect=failure)):
        exit_code = cli.main(["--url", "http://127.0.0.1:1", "list", "recents"])

    assert exit_code == 1
    assert "All connection attempts failed" in capsys.readouterr().err
