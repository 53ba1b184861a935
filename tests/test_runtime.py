# === NAVMAP v1 ===
# {
#   "module": "tests.test_runtime",
#   "purpose": "Runtime settings and structured logging tests.",
#   "sections": [
#     {"id": "tests", "name": "Test Cases", "anchor": "TST", "kind": "tests"}
#   ]
# }
# === /NAVMAP ===

"""Runtime settings and structured logging tests.

Covers ``OPSKIT_*`` environment overrides, level validation, and the JSON log
file written by :func:`OpsKit.logging_utils.setup_logging`.
"""

import json
import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from OpsKit.logging_utils import mask_sensitive_data, setup_logging
from OpsKit.settings import RuntimeSettings, get_settings, invalidate_settings_cache

# --- Test Cases ---


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("OPSKIT_LOG_LEVEL", "OPSKIT_LOG_FORMAT", "OPSKIT_LOG_DIR"):
        monkeypatch.delenv(name, raising=False)
    settings = RuntimeSettings()
    assert settings.log_level == "INFO"
    assert settings.log_format == "console"
    assert settings.log_dir is None


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("OPSKIT_LOG_LEVEL", "debug")
    monkeypatch.setenv("OPSKIT_LOG_DIR", str(tmp_path))
    monkeypatch.setenv("OPSKIT_WORKER_JOIN_TIMEOUT", "0.5")

    settings = get_settings()

    assert settings.log_level == "DEBUG"
    assert settings.log_dir == tmp_path
    assert settings.worker_join_timeout == 0.5
    assert get_settings() is settings
    invalidate_settings_cache()
    assert get_settings() is not settings


def test_invalid_level_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPSKIT_LOG_LEVEL", "chatty")
    with pytest.raises(ValidationError):
        RuntimeSettings()


def test_mask_sensitive_data_handles_nesting() -> None:
    masked = mask_sensitive_data(
        {"api_key": "k", "nested": {"Password": "p", "user": "u"}, "items": [{"token": "t"}]}
    )
    assert masked == {
        "api_key": "***masked***",
        "nested": {"Password": "***masked***", "user": "u"},
        "items": [{"token": "***masked***"}],
    }


def test_json_log_file_masks_secrets(tmp_path: Path) -> None:
    logger = setup_logging(level="debug", json_format=True, log_dir=tmp_path)
    assert logger.level == logging.DEBUG

    logging.getLogger("OpsKit.tests").info(
        "connected", extra={"stage": "config", "extra_fields": {"token": "abc", "host": "db"}}
    )
    for handler in logger.handlers:
        handler.flush()

    files = list(tmp_path.glob("opskit-*.jsonl"))
    assert len(files) == 1
    entry = json.loads(files[0].read_text(encoding="utf-8").splitlines()[-1])
    assert entry["message"] == "connected"
    assert entry["stage"] == "config"
    assert entry["host"] == "db"
    assert entry["token"] == "***masked***"


def test_setup_logging_replaces_its_own_handlers(tmp_path: Path) -> None:
    logger = setup_logging(log_dir=tmp_path)
    first = len(logger.handlers)
    setup_logging(log_dir=tmp_path)
    assert len(logger.handlers) == first
