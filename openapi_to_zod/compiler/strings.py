"""
String validators: format, length, pattern, content encoding and media type.
"""

from __future__ import annotations

import re

from ..errors import ConfigurationError
from ..lru_cache import LRUCache
from ..utils import add_description, escape_pattern

DEFAULT_DATE_TIME_VALIDATION = "z.iso.datetime()"

# format -> base validator; date-time is configurable and handled separately
FORMAT_VALIDATORS: dict[str, str] = {
    "uuid": "z.uuid()",
    "email": "z.email()",
    "uri": "z.url()",
    "url": "z.url()",
    "uri-reference": 'z.string().refine((val) => !/\\s/.test(val), { message: "Must be a valid URI reference" })',
    "hostname": (
        "z.string().refine((val) => /^(?=.{1,253}$)(?:(?!-)[A-Za-z0-9-]{1,63}(?<!-)\\.)*(?!-)[A-Za-z0-9-]{1,63}(?<!-)$/.test(val), "
        '{ message: "Must be a valid hostname" })'
    ),
    "byte": "z.base64()",
    "binary": "z.string()",
    "date": "z.iso.date()",
    "time": "z.iso.time()",
    "duration": (
        "z.string().refine((val) => /^P(?:(?:\\d+Y)?(?:\\d+M)?(?:\\d+D)?(?:T(?:\\d+H)?(?:\\d+M)?(?:\\d+(?:\\.\\d+)?S)?)?|\\d+W)$/.test(val) "
        '&& !/^PT?$/.test(val), { message: "Must be a valid ISO 8601 duration" })'
    ),
    "ipv4": "z.ipv4()",
    "ipv6": "z.ipv6()",
    "emoji": "z.emoji()",
    "base64": "z.base64()",
    "base64url": "z.base64url()",
    "nanoid": "z.nanoid()",
    "cuid": "z.cuid()",
    "cuid2": "z.cuid2()",
    "ulid": "z.ulid()",
    "cidr": "z.cidrv4()",
    "cidrv4": "z.cidrv4()",
    "cidrv6": "z.cidrv6()",
    "json-pointer": (
        'z.string().refine((val) => val === "" || /^(\\/([^~/]|~0|~1)+)+$/.test(val), { message: "Must be a valid JSON Pointer (RFC 6901)" })'
    ),
    "relative-json-pointer": (
        'z.string().refine((val) => /^(0|[1-9]\\d*)(#|(\\/([^~/]|~0|~1)+)*)$/.test(val), { message: "Must be a valid relative JSON Pointer" })'
    ),
}

ENCODING_VALIDATORS: dict[str, str] = {
    "base64": "z.base64()",
    "base64url": "z.base64url()",
    "quoted-printable": 'z.string().refine((val) => /^[\\x20-\\x7E\\r\\n=]*$/.test(val), { message: "Must be valid quoted-printable encoding" })',
    "7bit": "z.string()",
    "8bit": "z.string()",
    "binary": "z.string()",
}

_XML_REFINE = (
    '.refine((val) => { try { if (typeof DOMParser !== "undefined") { const parser = new DOMParser(); '
    'const doc = parser.parseFromString(val, "text/xml"); return !doc.querySelector("parsererror"); } '
    'return /^\\s*<[^>]+>/.test(val); } catch { return false; } }, { message: "Must be valid XML" })'
)
_YAML_REFINE = '.refine((val) => { try { return val.trim().length > 0 && !/^[[{]/.test(val.trim()); } catch { return false; } }, { message: "Must be valid YAML" })'

MEDIA_TYPE_REFINEMENTS: dict[str, str] = {
    "application/json": '.refine((val) => { try { JSON.parse(val); return true; } catch { return false; } }, { message: "Must be valid JSON" })',
    "application/xml": _XML_REFINE,
    "text/xml": _XML_REFINE,
    "application/yaml": _YAML_REFINE,
    "application/x-yaml": _YAML_REFINE,
    "text/yaml": _YAML_REFINE,
    "text/html": '.refine((val) => /<[^>]+>/.test(val), { message: "Must contain HTML tags" })',
    "text/plain": '.refine(() => true, { message: "Plain text content" })',
}


def build_date_time_validation(pattern: str | None) -> str:
    """Validator for format: date-time, optionally replaced by a custom regex.

    Raises:
        ConfigurationError: if the pattern is not a valid regular expression
    """
    if not pattern:
        return DEFAULT_DATE_TIME_VALIDATION
    try:
        re.compile(pattern)
    except re.error as e:
        raise ConfigurationError(f"Invalid regular expression pattern for customDateTimeFormatRegex: {pattern}. {e}") from e
    return f"z.string().regex(/{escape_pattern(pattern)}/)"


def cached_pattern(pattern: str, cache: LRUCache[str, str]) -> str:
    escaped = cache.get(pattern)
    if escaped is None:
        escaped = escape_pattern(pattern)
        cache.set(pattern, escaped)
    return escaped


def _constraints(schema: dict, cache: LRUCache[str, str]) -> str:
    code = ""
    if schema.get("minLength") is not None:
        code += f".min({schema['minLength']})"
    if schema.get("maxLength") is not None:
        code += f".max({schema['maxLength']})"
    if schema.get("pattern"):
        code += f".regex(/{cached_pattern(schema['pattern'], cache)}/)"
    return code


def compile_string(schema: dict, cache: LRUCache[str, str], date_time_validation: str, use_describe: bool) -> str:
    """
    Compile a string schema.

    A content encoding (only honoured without a format) replaces the base
    validator; length and pattern are applied after it. A content media type
    adds an independent refinement.
    """
    fmt = schema.get("format") or ""
    encoding = schema.get("contentEncoding")

    if encoding and not fmt:
        base = ENCODING_VALIDATORS.get(encoding, f'z.string().describe("Content encoding: {encoding}")')
    elif fmt == "date-time":
        base = date_time_validation
    else:
        base = FORMAT_VALIDATORS.get(fmt, "z.string()")

    code = base + _constraints(schema, cache)

    if not (encoding and not fmt):
        code += MEDIA_TYPE_REFINEMENTS.get(schema.get("contentMediaType") or "", "")

    return add_description(code, schema.get("description"), use_describe)
