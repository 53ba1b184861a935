"""Format dispatch for configuration documents.

``""``, ``"json"`` and ``"yaml"`` documents are all parsed with PyYAML's safe
loader, since YAML 1.2 accepts JSON documents as-is.  The parsed tree is then
handed to the structural decoder.  Unknown format names are rejected before
any parsing happens.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from .decoder import Decoder
from .errors import ConfigError, FormatError, UnknownFormatError

__all__ = [
    "SUPPORTED_FORMATS",
    "format_for_path",
    "load_document",
    "normalize_config_path",
    "unmarshal",
    "unmarshal_file",
]

logger = logging.getLogger("OpsKit.Config.formats")

SUPPORTED_FORMATS = ("", "json", "yaml")

_SUFFIX_FORMATS = {".json": "json", ".yaml": "yaml", ".yml": "yaml"}

Document = Union[bytes, bytearray, str]


def load_document(data: Document, format: str = "") -> Any:
    """Parse ``data`` and return the generic value tree.

    Raises:
        UnknownFormatError: If ``format`` is not one of :data:`SUPPORTED_FORMATS`.
        FormatError: If the document is malformed.
    """

    if format not in SUPPORTED_FORMATS:
        raise UnknownFormatError(format)
    if isinstance(data, bytearray):
        data = bytes(data)
    try:
        return yaml.safe_load(data)
    except yaml.YAMLError as exc:
        raise FormatError(f"failed to parse {format or 'yaml'} document: {exc}") from exc


def unmarshal(
    data: Document, output: Any, format: str = "", *, decoder: Optional[Decoder] = None
) -> None:
    """Parse ``data`` as ``format`` and decode the result into ``output``."""

    tree = load_document(data, format)
    (decoder or Decoder()).decode(tree, output)


def normalize_config_path(config_path: Union[str, Path]) -> Path:
    """Return a user-supplied configuration path with ``~`` and symlinks resolved."""

    expanded = Path(config_path).expanduser()
    try:
        return expanded.resolve(strict=False)
    except (OSError, RuntimeError):  # pragma: no cover - only triggered on rare filesystems
        return expanded


def format_for_path(path: Path) -> str:
    """Infer the document format from ``path``'s suffix, defaulting to ``""``."""

    return _SUFFIX_FORMATS.get(path.suffix.lower(), "")


def unmarshal_file(
    config_path: Union[str, Path],
    output: Any,
    format: Optional[str] = None,
    *,
    decoder: Optional[Decoder] = None,
) -> None:
    """Read ``config_path`` and decode it into ``output``.

    When ``format`` is omitted it is inferred from the file suffix.
    """

    normalized_path = normalize_config_path(config_path)
    resolved_format = format_for_path(normalized_path) if format is None else format
    if resolved_format not in SUPPORTED_FORMATS:
        raise UnknownFormatError(resolved_format)
    if not normalized_path.exists():
        raise ConfigError(f"Configuration file not found: {normalized_path}")

    logger.debug(
        "Loading configuration document",
        extra={
            "stage": "config",
            "extra_fields": {"path": str(normalized_path), "format": resolved_format or "yaml"},
        },
    )
    unmarshal(normalized_path.read_bytes(), output, resolved_format, decoder=decoder)
