import json
import logging
import logging.config
from pathlib import Path

from pathacl.utils.logging import JsonFormatter, configure_logging, get_logger


def test_json_formatter_includes_permission_context() -> None:
    record = logging.LogRecord("pathacl.test", logging.INFO, __file__, 1, "granted", (), None)
    record.resource_id = 7
    record.path = ["g", "id"]
    payload = json.loads(JsonFormatter().format(record))
    assert payload["message"] == "granted"
    assert payload["resource_id"] == 7
    assert payload["path"] == ["g", "id"]


def test_configure_logging_writes_json_file(tmp_path: Path) -> None:
    configure_logging(level="DEBUG", log_dir=tmp_path, enable_rich=False)
    try:
        get_logger("pathacl.test").info("hello", extra={"principal": "bob"})
        for handler in logging.getLogger().handlers:
            handler.flush()
        lines = (tmp_path / "pathacl.log").read_text(encoding="utf-8").splitlines()
        entry = json.loads(lines[-1])
        assert entry["message"] == "hello"
        assert entry["principal"] == "bob"
    finally:
        logging.config.dictConfig({"version": 1, "disable_existing_loggers": False})
