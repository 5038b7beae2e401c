"""
Identifier derivation: type names, validator identifiers, enum member keys
and operation names.
"""

from __future__ import annotations

import fnmatch
import json
import logging
import re

logger = logging.getLogger(__name__)

_SIMPLE_IDENTIFIER = re.compile(r"^[a-zA-Z][a-zA-Z0-9]*$")
_INVALID_CHARS = re.compile(r"[^a-zA-Z0-9._\-\s]+")
_WORD_SEPARATORS = re.compile(r"[.\-_\s]+")
_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]+")
_JS_IDENTIFIER = re.compile(r"^[a-zA-Z_$][a-zA-Z0-9_$]*$")
_GLOB_CHARS = re.compile(r"[*?\[\]{}!]")
_PATH_SEGMENT_SEPARATORS = re.compile(r"[-_.]")


def _upper_first(text: str) -> str:
    return text[:1].upper() + text[1:]


def _lower_first(text: str) -> str:
    return text[:1].lower() + text[1:]


def _split_words(text: str) -> list[str]:
    """Replace invalid identifier characters, then split on delimiters."""
    sanitized = _INVALID_CHARS.sub("_", text)
    return [word for word in _WORD_SEPARATORS.split(sanitized) if word]


def to_pascal_case(value: str | int | float) -> str:
    """Convert a schema name to a PascalCase type name.

    Names without delimiters keep their internal capitalization:
        "userProfile" -> "UserProfile"
        "user-profile" -> "UserProfile"
        "Company.Models.User" -> "CompanyModelsUser"
        "2fa_settings" -> "N2faSettings"
    """
    text = str(value)
    if _SIMPLE_IDENTIFIER.match(text):
        return _upper_first(text)

    words = _split_words(text)
    result = "".join(_upper_first(word) for word in words) if words else "Value"
    if result[:1].isdigit():
        result = f"N{result}"
    if not result.strip("_"):
        return "Value"
    return result


def to_camel_case(value: str, prefix: str | None = None, suffix: str | None = None) -> str:
    """Convert a schema name to lowerCamelCase with an optional prefix/suffix.

    The join boundaries are re-capitalized so the result stays camelCase:
        to_camel_case("User", prefix="api") -> "apiUser"
        to_camel_case("User", prefix="Api", suffix="dto") -> "apiUserDto"
    """
    words = _split_words(value)
    if not words:
        name = _lower_first(value)
    else:
        name = _lower_first(words[0]) + "".join(_upper_first(word) for word in words[1:])

    if prefix:
        name = _lower_first(prefix) + _upper_first(name)
    if suffix:
        name = name + _upper_first(suffix)
    return name


def schema_var_name(name: str, prefix: str | None = None, suffix: str | None = None) -> str:
    """Identifier of the exported validator: "User" -> "userSchema"."""
    return f"{to_camel_case(name, prefix, suffix)}Schema"


def is_valid_identifier(name: str) -> bool:
    return bool(_JS_IDENTIFIER.match(name))


def quote_property_name(name: str) -> str:
    """Object-literal key, quoted only when it is not a valid identifier."""
    return name if is_valid_identifier(name) else json.dumps(name)


def property_access(name: str, target: str = "obj") -> str:
    return f"{target}.{name}" if is_valid_identifier(name) else f"{target}[{json.dumps(name)}]"


def _is_glob(pattern: str) -> bool:
    return bool(_GLOB_CHARS.search(pattern))


def strip_prefix(value: str, pattern: str | None, ensure_leading_char: str | None = None) -> str:
    """Remove a literal or glob prefix from a value.

    For glob patterns the longest matching prefix is removed. A value that
    would become empty is returned unchanged (or as the leading char).
    """
    if not pattern:
        return value

    if _is_glob(pattern):
        longest = 0
        for i in range(1, len(value) + 1):
            if fnmatch.fnmatchcase(value[:i], pattern):
                longest = i
        if longest == 0:
            return value
        stripped = value[longest:]
    elif value.startswith(pattern):
        stripped = value[len(pattern) :]
    else:
        return value

    if ensure_leading_char:
        if not stripped:
            return ensure_leading_char
        if not stripped.startswith(ensure_leading_char):
            return f"{ensure_leading_char}{stripped}"
        return stripped
    return stripped or value


def strip_schema_prefix(name: str, patterns: str | list[str] | None) -> str:
    """Apply the first prefix pattern that changes the name."""
    if not patterns:
        return name
    for pattern in [patterns] if isinstance(patterns, str) else patterns:
        stripped = strip_prefix(name, pattern)
        if stripped != name:
            return stripped
    return name


def strip_path_prefix(path: str, pattern: str | None) -> str:
    """Remove a prefix from an API path, keeping the leading slash."""
    if not pattern:
        return path
    if not _is_glob(pattern):
        pattern = pattern.strip()
        if not pattern.startswith("/"):
            pattern = f"/{pattern}"
        if pattern.endswith("/") and pattern != "/":
            pattern = pattern[:-1]
    return strip_prefix(path, pattern, "/")


def _capitalize_segment(segment: str) -> str:
    if _PATH_SEGMENT_SEPARATORS.search(segment):
        return "".join(part[:1].upper() + part[1:].lower() for part in _PATH_SEGMENT_SEPARATORS.split(segment) if part)
    return _upper_first(segment)


def method_name_from_path(method: str, path: str) -> str:
    """Operation name derived from the route: ("get", "/users/{userId}") -> "GetUsersByUserId"."""
    segments = []
    for segment in path.split("/"):
        if not segment:
            continue
        if segment.startswith("{") and segment.endswith("}"):
            segments.append(f"By{_capitalize_segment(segment[1:-1])}")
        else:
            segments.append(_capitalize_segment(segment))
    return f"{method[:1].upper()}{method[1:].lower()}{''.join(segments)}"


def get_operation_name(operation_id: str | None, method: str, path: str, use_operation_id: bool = True) -> str:
    if use_operation_id and operation_id:
        return to_pascal_case(operation_id) if "-" in operation_id else _upper_first(operation_id)
    return method_name_from_path(method, path)


def _claim_key(key: str, used_keys: set[str] | None) -> str:
    """Reserve a key, suffixing 2, 3, ... on a case-insensitive collision."""
    if used_keys is None:
        return key
    candidate = key
    counter = 2
    while candidate.lower() in used_keys:
        candidate = f"{key}{counter}"
        counter += 1
    used_keys.add(candidate.lower())
    return candidate


def _title_words(text: str) -> str:
    words = [word for word in _NON_ALNUM.split(text) if word]
    result = "".join(word[:1].upper() + word[1:].lower() for word in words)
    if not result:
        return "Value"
    if result[0].isdigit():
        return f"Value{result}"
    return result


def string_to_enum_member(value: str, used_keys: set[str] | None = None) -> str:
    """Enum member key for a string literal.

    Sort-order sigils become suffixes instead of being dropped:
        "name" -> "Name", "-name" -> "NameDesc", "+name" -> "NameAsc"
    """
    if value == "":
        key = "Empty"
    elif value == "-":
        key = "Desc"
    elif value == "+":
        key = "Asc"
    elif value[0] == "-":
        key = f"{_title_words(value[1:])}Desc"
    elif value[0] == "+":
        key = f"{_title_words(value[1:])}Asc"
    else:
        key = _title_words(value)
    return _claim_key(key, used_keys)


def numeric_to_enum_member(value: int | float | str, used_keys: set[str] | None = None, index: int | None = None) -> str:
    """Enum member key for a numeric literal: 5 -> "Value5", -5 -> "ValueNeg5", "+5" -> "Value5Asc".

    Numbers without a natural textual key (fractions, NaN) fall back to the
    literal's position when one is given.
    """
    if isinstance(value, str):
        text = value.strip()
        if text.startswith("+"):
            key = f"Value{text[1:]}Asc"
        elif text.startswith("-"):
            key = f"Value{text[1:]}Desc"
        else:
            key = f"Value{text}"
    elif isinstance(value, float) and not value.is_integer():
        if index is not None:
            key = f"Value{index}"
        else:
            key = "Value" + _NON_ALNUM.sub("_", str(value).replace("-", "Neg"))
    else:
        number = int(value)
        key = f"ValueNeg{-number}" if number < 0 else f"Value{number}"
    return _claim_key(key, used_keys)
