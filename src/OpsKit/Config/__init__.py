# === NAVMAP v1 ===
# {
#   "module": "OpsKit.Config",
#   "purpose": "Package initialization for OpsKit.Config",
#   "sections": []
# }
# === /NAVMAP ===

"""Configuration helpers: structural decoding, format dispatch, and env lookups.

Typical use reads a document, decodes it into a dataclass, and falls back to
environment variables for anything the document leaves out::

    @dataclass
    class Settings:
        max_retries: int = 3
        timeout: timedelta = timedelta(seconds=10)

    settings = Settings()
    unmarshal_file("config.yaml", settings)
    settings.max_retries = get_env_int("MAX_RETRIES", settings.max_retries)
"""

from .coercion import DEFAULT_HOOKS, parse_bool, parse_duration, string_to_timedelta_hook
from .decoder import Decoder, DecoderConfig, decode
from .env import (
    get_env_bool,
    get_env_duration,
    get_env_float,
    get_env_int,
    get_env_str,
    non_none_or_default,
)
from .errors import (
    ConfigError,
    DecodeError,
    DecoderConfigError,
    FormatError,
    InvalidTargetError,
    OpsKitError,
    UnknownFormatError,
)
from .fields import squash
from .formats import load_document, unmarshal, unmarshal_file
from .naming import names_match, normalize_name

__all__ = [
    "ConfigError",
    "DEFAULT_HOOKS",
    "DecodeError",
    "Decoder",
    "DecoderConfig",
    "DecoderConfigError",
    "FormatError",
    "InvalidTargetError",
    "OpsKitError",
    "UnknownFormatError",
    "decode",
    "get_env_bool",
    "get_env_duration",
    "get_env_float",
    "get_env_int",
    "get_env_str",
    "load_document",
    "names_match",
    "non_none_or_default",
    "normalize_name",
    "parse_bool",
    "parse_duration",
    "squash",
    "string_to_timedelta_hook",
    "unmarshal",
    "unmarshal_file",
]
