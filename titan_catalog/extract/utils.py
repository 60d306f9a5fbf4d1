"""Shared helpers for the extraction pipeline."""

import dataclasses
import re
from enum import Enum
from typing import Any, Optional, Union

from .models import NO_VALUE, TEMPLATE_RANGE, StatValue

_FIRST_INT_RE = re.compile(r"(\d+)")
_LOOSE_NUMBER_RE = re.compile(r"-?\d+(\.\d+)?")
_SIGNED_INT_RE = re.compile(r"^[+-]?\d+$")
_TRAIT_SPLIT_RE = re.compile(r",|•")


def slugify(text: str, separator: str = "-") -> str:
    """Lowercase ``text`` and collapse non-alphanumeric runs to ``separator``.

    Returns an empty string when nothing alphanumeric is left.

    >>> slugify("Reaver Titan (Legio Mortis)")
    'reaver-titan-legio-mortis'
    """
    slug = re.sub(r"[^a-z0-9]+", separator, text.lower())
    return slug.strip(separator)


def sanitize_name(name: str) -> str:
    """Strip internal variant tags from catalog display names.

    Catalog authors embed markers such as ``+=audaxis=``, ``=tag=`` and
    ``[WH]`` in entry names to scope entries to a faction or chassis.

    >>> sanitize_name("Melta Cannon +=audaxis= [WH]")
    'Melta Cannon'
    """
    name = re.sub(r"\s*\+=.*?=\s*", " ", name)
    name = re.sub(r"\s*=\s*[^=]+?\s*=\s*", " ", name)
    name = re.sub(r"\s*\[[^\[\]]+\]\s*", " ", name)
    return re.sub(r"\s+", " ", name).strip()


def parse_plus_number(text: Optional[str]) -> Optional[int]:
    """First unsigned integer in ``text`` ("3+" -> 3, "S8" -> 8)."""
    if not text:
        return None
    match = _FIRST_INT_RE.search(text)
    return int(match.group(1)) if match else None


def parse_number_loose(text: Optional[str]) -> Optional[int]:
    """First (possibly signed) number in ``text``, truncated to int.

    Handles "8", "8.0", "8+", "8 pips".
    """
    if not text or not text.strip():
        return None
    match = _LOOSE_NUMBER_RE.search(text)
    if not match:
        return None
    return int(float(match.group(0)))


def parse_number(raw: Optional[str]) -> Optional[Union[int, float]]:
    """Parse a numeric attribute value; integral floats come back as int."""
    if raw is None:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    if value != value or value in (float("inf"), float("-inf")):
        return None
    return int(value) if value.is_integer() else value


def pick_first(*values):
    """First value that is not None."""
    for value in values:
        if value is not None:
            return value
    return None


def lookup(chars: dict[str, str], *keys: str) -> Optional[str]:
    """Value of the first key present in a characteristic map."""
    for key in keys:
        if key in chars:
            return chars[key]
    return None


def normalize_range_part(part: str) -> StatValue:
    """Normalize one half of a range/accuracy value.

    "-", "n/a" and blanks become NO_VALUE; "t"/"template" becomes
    TEMPLATE_RANGE; otherwise the first integer, or the cleaned text.
    """
    text = part.strip()
    lowered = text.lower()
    if not text or text == "-" or lowered == "n/a":
        return NO_VALUE
    if lowered in ("t", "template"):
        return TEMPLATE_RANGE
    cleaned = text.replace('"', "").strip()
    match = re.search(r"-?\d+", cleaned)
    return int(match.group(0)) if match else cleaned


def parse_short_long(text: Optional[str]) -> tuple[StatValue, StatValue]:
    """Split a combined "short/long" value.

    A single value is treated as the long value.
    """
    if not text:
        return NO_VALUE, NO_VALUE
    parts = [p.strip() for p in text.split("/")]
    if len(parts) >= 2:
        return normalize_range_part(parts[0]), normalize_range_part(parts[1])
    return NO_VALUE, normalize_range_part(parts[0])


def normalize_accuracy(text: Optional[str]) -> StatValue:
    """Accuracy modifier: "+1" -> 1, "-" -> NO_VALUE, other text kept."""
    if text is None:
        return NO_VALUE
    value = text.strip()
    if not value or value == "-" or value.lower() == "n/a":
        return NO_VALUE
    if _SIGNED_INT_RE.match(value):
        return int(value)
    return value


def split_traits(text: Optional[str]) -> list[str]:
    """Split a trait list on commas and bullets, keeping braces intact."""
    if not text:
        return []
    return [t.strip() for t in _TRAIT_SPLIT_RE.split(text) if t.strip()]


def format_rule(name: str, description: str) -> str:
    return f"{name}: {description}" if name else description


def dedupe(items) -> list:
    """Order-preserving de-duplication."""
    seen = set()
    out = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out


def to_plain(value: Any) -> Any:
    """Convert dataclasses, enums and tuples into JSON/YAML-safe values."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            f.name: to_plain(getattr(value, f.name))
            for f in dataclasses.fields(value)
        }
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    if isinstance(value, dict):
        return {str(k): to_plain(v) for k, v in value.items()}
    return value


def sort_by_name(records) -> list:
    """Records ordered by display name, case-insensitively."""
    return sorted(records, key=lambda r: (r.name.lower(), r.name))
