"""Field-name normalisation used when matching input keys to declared fields."""

from __future__ import annotations

import re

__all__ = ["normalize_name", "names_match"]

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]+")


def normalize_name(name: str) -> str:
    """Return ``name`` reduced to its ASCII alphanumerics, lower-cased.

    Examples:
        >>> normalize_name("Max-Retries")
        'maxretries'
        >>> normalize_name("MAX_RETRIES")
        'maxretries'
    """

    return _NON_ALNUM.sub("", str(name)).lower()


def names_match(lhs: str, rhs: str) -> bool:
    """Return ``True`` when ``lhs`` and ``rhs`` normalise to the same name."""

    return normalize_name(lhs) == normalize_name(rhs)
