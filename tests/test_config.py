import asyncio
from pathlib import Path

import pytest

from pathacl.core.config import ConfigManager
from pathacl.utils.errors import ConfigurationError


def test_load_yaml_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "pathacl.yml"
    config_path.write_text(
        "limits:\n  max_path_depth: 8\naudit:\n  path: audit/events.log\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("PATHACL_CONFIG", str(config_path))
    manager = ConfigManager()
    settings = asyncio.run(manager.load())
    assert settings.limits.max_path_depth == 8
    assert settings.limits.max_segment_length == 256
    assert settings.audit.path == Path("audit/events.log")


def test_load_toml_config(tmp_path: Path) -> None:
    config_path = tmp_path / "pathacl.toml"
    config_path.write_text('[logging]\nlevel = "DEBUG"\nrich = false\n', encoding="utf-8")
    settings = asyncio.run(ConfigManager(config_path).load())
    assert settings.logging.level == "DEBUG"
    assert not settings.logging.rich


def test_missing_file_uses_defaults(tmp_path: Path) -> None:
    settings = asyncio.run(ConfigManager(tmp_path / "absent.yml").load())
    assert settings.limits.max_path_depth == 64
    assert settings.audit.enabled


def test_invalid_config_raises(tmp_path: Path) -> None:
    config_path = tmp_path / "pathacl.yml"
    config_path.write_text("limits:\n  max_path_depth: 0\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        asyncio.run(ConfigManager(config_path).load())

    other = tmp_path / "pathacl.ini"
    other.write_text("[limits]\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        asyncio.run(ConfigManager(other).load())


@pytest.mark.asyncio
async def test_reload_notifies_callbacks(tmp_path: Path) -> None:
    config_path = tmp_path / "pathacl.yml"
    config_path.write_text("limits:\n  max_path_depth: 4\n", encoding="utf-8")
    manager = ConfigManager(config_path)
    seen = []

    async def _callback(settings) -> None:
        seen.append(settings.limits.max_path_depth)

    manager.register_callback(_callback)
    await manager.get_settings()
    config_path.write_text("limits:\n  max_path_depth: 5\n", encoding="utf-8")
    await manager.reload()
    assert seen == [5]
    assert (await manager.get_settings()).limits.max_path_depth == 5
