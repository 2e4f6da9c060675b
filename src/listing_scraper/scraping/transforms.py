"""Transform chain interpreter for extracted values.

Every transform is best effort: when a step cannot sensibly apply (missing
option, bad pattern, unparseable number) the value passes through unchanged.
"""

import re
from typing import Any, Callable
from urllib.parse import urljoin

from .models import TransformConfig, TransformType

NUMBER_CHARS_RE = re.compile(r"[^\d.,]")
LEADING_NUMBER_RE = re.compile(r"\d+(?:\.\d*)?|\.\d+")
JS_REPLACEMENT_RE = re.compile(r"\$(\d{1,2}|&|\$)")

# Checked in priority order
CURRENCY_MARKERS: list[tuple[str, tuple[str, ...]]] = [
    ("EUR", ("EUR", "€")),
    ("RON", ("RON", "lei")),
    ("USD", ("USD", "$")),
]


def _format_number(number: float) -> str:
    """Render a parsed number the way it is stored on listings."""
    if number.is_integer():
        return str(int(number))
    return repr(number)


def extract_number(value: str) -> str:
    """Parse a European-formatted number ("1.250,50 EUR" -> "1250.5").

    Dots are always treated as thousands separators and the first comma as
    the decimal separator, so US-formatted input ("1,234.56") parses to a
    different number ("1.23456").
    """
    cleaned = NUMBER_CHARS_RE.sub("", value).replace(".", "").replace(",", ".", 1)
    match = LEADING_NUMBER_RE.match(cleaned)
    if not match:
        return value
    return _format_number(float(match.group(0)))


def extract_currency(value: str) -> str:
    """Map currency markers in the value to an ISO code."""
    for code, markers in CURRENCY_MARKERS:
        if any(marker in value for marker in markers):
            return code
    return value


def resolve_url(value: str, base_url: str) -> str:
    """Resolve a relative reference against the page URL."""
    if not value or value.startswith("http"):
        return value
    try:
        return urljoin(base_url, value)
    except ValueError:
        return value


def _regex(value: str, options: dict[str, Any]) -> str:
    pattern = options.get("pattern")
    if not pattern:
        return value
    try:
        match = re.search(pattern, value)
        if not match:
            return value
        group = options.get("group") or 0
        if isinstance(group, str) and group.isdigit():
            group = int(group)
        return match.group(group) or value
    except (re.error, IndexError, TypeError):
        return value


def _js_replacement(replacement: str) -> Callable[[re.Match], str]:
    """Build a re.sub callback honouring "$1" and "$&" references."""

    def substitute(match: re.Match) -> str:
        def expand(ref: re.Match) -> str:
            token = ref.group(1)
            if token == "$":
                return "$"
            if token == "&":
                return match.group(0)
            # "$12" falls back to "$1" + "2" when there is no group 12; "$0" stays literal
            groups = match.re.groups
            if len(token) == 2 and 1 <= int(token) <= groups:
                return match.group(int(token)) or ""
            if 1 <= int(token[0]) <= groups:
                return (match.group(int(token[0])) or "") + token[1:]
            return ref.group(0)

        return JS_REPLACEMENT_RE.sub(expand, replacement)

    return substitute


def _replace(value: str, options: dict[str, Any]) -> str:
    find = options.get("find")
    if not find:
        return value
    replacement = options.get("replace") or ""
    try:
        return re.sub(find, _js_replacement(str(replacement)), value)
    except (re.error, TypeError):
        return value


def _default(value: str, options: dict[str, Any]) -> str:
    fallback = options.get("value")
    if not value and fallback:
        return str(fallback)
    return value


TRANSFORM_HANDLERS: dict[TransformType, Callable[[str, dict[str, Any], str], str]] = {
    TransformType.TRIM: lambda value, options, base_url: value.strip(),
    TransformType.EXTRACT_NUMBER: lambda value, options, base_url: extract_number(value),
    TransformType.EXTRACT_CURRENCY: lambda value, options, base_url: extract_currency(value),
    TransformType.RESOLVE_URL: lambda value, options, base_url: resolve_url(value, base_url),
    TransformType.REGEX: lambda value, options, base_url: _regex(value, options),
    TransformType.REPLACE: lambda value, options, base_url: _replace(value, options),
    TransformType.DEFAULT: lambda value, options, base_url: _default(value, options),
}


def apply_transform(value: str, transform: TransformConfig, base_url: str) -> str:
    """Apply one transform step."""
    handler = TRANSFORM_HANDLERS[transform.type]
    return handler(value, transform.options, base_url)


def apply_transforms(
    value: str,
    transforms: list[TransformConfig],
    base_url: str,
) -> str:
    """Apply a transform chain left to right.

    Args:
        value: Raw extracted value.
        transforms: Ordered transform steps.
        base_url: URL of the page the value came from, used by resolveUrl.

    Returns:
        The transformed value.
    """
    result = value
    for transform in transforms:
        result = apply_transform(result, transform, base_url)
    return result
