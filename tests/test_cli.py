import asyncio
import json
from pathlib import Path

import pytest
from rich.console import Console
from typer.testing import CliRunner

from pathacl.cli import app as cli
from pathacl.core.config import ConfigManager
from pathacl.core.ui import RichUI
from pathacl.main import build_runtime
from pathacl.utils.errors import PathTooLongError

runner = CliRunner()


@pytest.fixture(autouse=True)
def _reset_runtime(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "runtime", None)


def test_embed_prints_wrapped_document() -> None:
    result = runner.invoke(cli.app, ["embed", '{"a":1}', "--path", "x", "-p", "y"])
    assert result.exit_code == 0
    assert json.loads(result.stdout) == {"x": {"y": {"a": 1}}}


def test_embed_rejects_injection() -> None:
    result = runner.invoke(cli.app, ["embed", '{},"other":{}', "--path", "x"])
    assert result.exit_code == 1
    assert "injection" in result.stdout


def test_validate_reports_unsafe_keys() -> None:
    assert runner.invoke(cli.app, ["validate", "{}", "--key", "fine"]).exit_code == 0
    result = runner.invoke(cli.app, ["validate", "{}", "--key", 'bad"key'])
    assert result.exit_code == 1
    assert "unsafe" in result.stdout


def test_events_lists_audit_records(tmp_path: Path) -> None:
    config_path = tmp_path / "pathacl.yml"
    config_path.write_text(f"audit:\n  path: {tmp_path / 'audit.log'}\n", encoding="utf-8")
    manager = ConfigManager(config_path)
    settings = asyncio.run(manager.load())
    context = build_runtime(settings, manager)
    cli.set_runtime(context)

    asyncio.run(
        context.access_control.grant(1, "alice", ["g"], "bob", 10, False, caller="alice")
    )
    result = runner.invoke(cli.app, ["events", "--limit", "5"])
    assert result.exit_code == 0
    assert "grant" in result.stdout
    assert "alice" in result.stdout

    result = runner.invoke(cli.app, ["config", "show"])
    assert result.exit_code == 0
    assert "max_path_depth" in result.stdout


def test_config_reload_applies_new_path_limits(tmp_path: Path) -> None:
    config_path = tmp_path / "pathacl.yml"
    config_path.write_text(
        "limits:\n  max_path_depth: 4\naudit:\n  enabled: false\n", encoding="utf-8"
    )
    manager = ConfigManager(config_path)
    context = build_runtime(asyncio.run(manager.load()), manager)
    cli.set_runtime(context)
    assert context.access_control.limits.max_path_depth == 4

    config_path.write_text(
        "limits:\n  max_path_depth: 2\naudit:\n  enabled: false\n", encoding="utf-8"
    )
    result = runner.invoke(cli.app, ["config", "reload"])
    assert result.exit_code == 0
    assert context.settings.limits.max_path_depth == 2
    assert context.access_control.limits.max_path_depth == 2
    with pytest.raises(PathTooLongError):
        asyncio.run(
            context.access_control.grant(1, "alice", ["a", "b", "c"], "bob", 10, False, caller="alice")
        )


def test_safety_report_marks_each_check() -> None:
    ui = RichUI(Console(record=True, width=120))
    assert ui.safety_report([("fragment", "{}", True), ("key", "fine", True)])
    assert not ui.safety_report([("fragment", "{}", True), ("key", 'bad"key', False)])
    output = ui.console.export_text()
    assert "Embedding Safety" in output
    assert 'bad"key' in output
    assert "unsafe" in output
