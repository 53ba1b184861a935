"""Structured logging helpers shared across OpsKit components."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Optional

from .Config.naming import normalize_name
from .settings import get_settings

__all__ = ["JSONFormatter", "mask_sensitive_data", "setup_logging"]

_SENSITIVE_KEYS = {"authorization", "apikey", "token", "secret", "password"}
_MASK = "***masked***"


def mask_sensitive_data(payload: Dict[str, object]) -> Dict[str, object]:
    """Return a copy of ``payload`` with common secret fields masked."""

    def _mask_value(value: object, key_hint: Optional[str] = None) -> object:
        if key_hint is not None and normalize_name(key_hint) in _SENSITIVE_KEYS:
            return _MASK
        if isinstance(value, dict):
            return {key: _mask_value(item, str(key)) for key, item in value.items()}
        if isinstance(value, list):
            return [_mask_value(item) for item in value]
        return value

    return {key: _mask_value(value, key) for key, value in payload.items()}


class JSONFormatter(logging.Formatter):
    """Formatter emitting masked JSON log entries."""

    def format(self, record: logging.LogRecord) -> str:
        """Render ``record`` as a JSON string with OpsKit-specific fields."""

        now = datetime.now(timezone.utc)
        payload: Dict[str, object] = {
            "timestamp": now.isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "stage": getattr(record, "stage", None),
        }
        if hasattr(record, "extra_fields") and isinstance(record.extra_fields, dict):
            payload.update(record.extra_fields)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(mask_sensitive_data(payload), default=str)


def setup_logging(
    *,
    level: Optional[str] = None,
    json_format: Optional[bool] = None,
    log_dir: Optional[Path] = None,
    max_log_size_mb: int = 100,
    propagate: bool = False,
) -> logging.Logger:
    """Configure the ``OpsKit`` logger.

    Arguments left as ``None`` fall back to :class:`~OpsKit.settings.RuntimeSettings`.
    Handlers installed by a previous call are replaced.
    """

    settings = get_settings()
    resolved_level = (level or settings.log_level).upper()
    use_json = settings.log_format == "json" if json_format is None else json_format
    resolved_dir = log_dir if log_dir is not None else settings.log_dir

    logger = logging.getLogger("OpsKit")
    logger.setLevel(getattr(logging, resolved_level, logging.INFO))

    for handler in list(logger.handlers):
        if getattr(handler, "_opskit_managed", False):
            logger.removeHandler(handler)
            if isinstance(handler, logging.StreamHandler):
                stream = getattr(handler, "stream", None)
                if stream in (sys.stdout, sys.stderr):
                    continue
            handler.close()

    stream_handler = logging.StreamHandler(sys.stdout)
    if use_json:
        stream_handler.setFormatter(JSONFormatter())
    else:
        stream_handler.setFormatter(logging.Formatter("%(levelname)s: %(name)s: %(message)s"))
    stream_handler._opskit_managed = True  # type: ignore[attr-defined]
    logger.addHandler(stream_handler)

    if resolved_dir is not None:
        resolved_dir = Path(resolved_dir)
        resolved_dir.mkdir(parents=True, exist_ok=True)
        today = datetime.now(timezone.utc).strftime("%Y%m%d")
        file_handler = RotatingFileHandler(
            resolved_dir / f"opskit-{today}.jsonl",
            maxBytes=int(max_log_size_mb * 1024 * 1024),
            backupCount=5,
        )
        file_handler.setFormatter(JSONFormatter())
        file_handler._opskit_managed = True  # type: ignore[attr-defined]
        logger.addHandler(file_handler)

    logger.propagate = propagate
    return logger
