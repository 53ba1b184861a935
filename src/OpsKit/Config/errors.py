"""Exception hierarchy shared by the decoder, format dispatcher, and env helpers.

Configuration handling spans document parsing, structural decoding, and
environment lookups.  This module groups the failure modes into a small
hierarchy so callers can react to high-level categories (for example, an
unknown document format vs. a field that could not be coerced) while still
having access to the per-field detail when finer-grained reporting is needed.
"""

from __future__ import annotations

from typing import Optional, Sequence

__all__ = [
    "OpsKitError",
    "ConfigError",
    "DecodeError",
    "InvalidTargetError",
    "DecoderConfigError",
    "FormatError",
    "UnknownFormatError",
]


class OpsKitError(RuntimeError):
    """Base exception for OpsKit configuration failures."""


class ConfigError(OpsKitError):
    """Raised when configuration inputs cannot be turned into typed settings."""


class DecodeError(ConfigError):
    """Raised when one or more fields could not be decoded into their target type.

    ``errors`` holds one message per failing field.  Fields that decoded
    successfully before or after the failure keep their decoded values.
    """

    def __init__(self, message: str, *, errors: Optional[Sequence[str]] = None) -> None:
        super().__init__(message)
        self.errors = tuple(errors or (message,))

    @classmethod
    def from_errors(cls, errors: Sequence[str]) -> "DecodeError":
        count = len(errors)
        noun = "error" if count == 1 else "errors"
        lines = "\n".join(f"* {error}" for error in errors)
        return cls(f"{count} {noun} decoding:\n\n{lines}", errors=errors)


class InvalidTargetError(DecodeError):
    """Raised when the decode output is not something the decoder can write into."""


class DecoderConfigError(ConfigError):
    """Raised when a decoder cannot be constructed from its configuration."""


class FormatError(ConfigError):
    """Raised when a configuration document cannot be deserialized."""


class UnknownFormatError(FormatError):
    """Raised when a document format name is not recognised."""

    def __init__(self, format_name: str) -> None:
        super().__init__(f"unknown config format: {format_name}")
        self.format_name = format_name
# === NAVMAP v1 ===
# {
#   "module": "OpsKit.Config.errors",
#   "purpose": "Define the exception hierarchy used by decoding, format dispatch, and env lookups",
#   "sections": [
#     {"id": "base", "name": "Base Exceptions", "anchor": "BAS", "kind": "api"},
#     {"id": "decode", "name": "Decode Errors", "anchor": "DEC", "kind": "api"},
#     {"id": "format", "name": "Format Errors", "anchor": "FMT", "kind": "api"}
#   ]
# }
# === /NAVMAP ===
