"""Shared msgspec policy and helpers."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import msgspec


class StructBaseStrict(
    msgspec.Struct,
    frozen=True,
    kw_only=True,
    omit_defaults=False,
    repr_omit_defaults=True,
    forbid_unknown_fields=True,
):
    """Base struct for strict contracts."""


_VALIDATION_RE = re.compile(r"^(?P<summary>.*?)(?:\s+-\s+at\s+`(?P<path>[^`]+)`)?$")


def _json_enc_hook(obj: object) -> object:
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, type):
        return f"{obj.__module__}.{obj.__qualname__}"
    if isinstance(obj, (bytearray, memoryview)):
        return bytes(obj)
    raise TypeError


def _dec_hook(type_hint: Any, obj: object) -> object:
    if type_hint is Path and isinstance(obj, str):
        return Path(obj)
    msg = f"Unsupported type {type_hint!r} for value {obj!r}"
    raise NotImplementedError(msg)


JSON_ENCODER = msgspec.json.Encoder(
    enc_hook=_json_enc_hook,
    decimal_format="string",
    uuid_format="canonical",
)
JSON_DECODER = msgspec.json.Decoder()


def validation_error_payload(exc: msgspec.MsgspecError) -> dict[str, str]:
    """Normalize a msgspec decode or validation error for diagnostics.

    Parameters
    ----------
    exc
        Error raised by msgspec decoding/conversion.

    Returns
    -------
    dict[str, str]
        Normalized error payload containing type, summary, and optional path.
    """
    message = str(exc).strip()
    match = _VALIDATION_RE.match(message)
    payload: dict[str, str] = {"type": exc.__class__.__name__}
    if match:
        summary = (match.group("summary") or "").strip()
        if summary:
            payload["summary"] = summary
        path = match.group("path")
        if path:
            payload["path"] = path
        return payload
    payload["summary"] = message
    return payload


def dumps_json(obj: object, *, pretty: bool = False, indent: int = 2) -> bytes:
    """Serialize builtin-friendly data to compact JSON bytes.

    Parameters
    ----------
    obj
        Object to serialize.
    pretty
        Whether to format with indentation.
    indent
        Indentation width used when ``pretty`` is set.

    Returns
    -------
    bytes
        JSON payload.
    """
    raw = JSON_ENCODER.encode(obj)
    if not pretty:
        return raw
    return msgspec.json.format(raw, indent=indent)


def loads_json(buf: bytes | str) -> object:
    """Parse JSON text into untyped builtin values.

    Returns
    -------
    object
        Parsed tree of dicts, lists, and scalars.
    """
    return JSON_DECODER.decode(buf)


def encode_json_lines(items: list[object]) -> bytes:
    """Serialize items to JSON Lines bytes.

    Parameters
    ----------
    items
        Items to serialize.

    Returns
    -------
    bytes
        JSON Lines payload.
    """
    return JSON_ENCODER.encode_lines(items)


def decode_json_lines(buf: bytes | str) -> list[object]:
    """Parse JSON Lines into untyped builtin values.

    Returns
    -------
    list[object]
        One parsed tree per non-empty line.
    """
    return JSON_DECODER.decode_lines(buf)


def convert[T](obj: object, *, target_type: type[T] | Any, strict: bool = True) -> T:
    """Convert builtin data into a target leaf type.

    Parameters
    ----------
    obj
        Object to convert.
    target_type
        Target type for conversion.
    strict
        Whether to enforce strict conversion.

    Returns
    -------
    T
        Converted payload.
    """
    return msgspec.convert(obj, type=target_type, strict=strict, dec_hook=_dec_hook)


def to_builtins(obj: object, *, str_keys: bool = True) -> object:
    """Convert a leaf object into builtin JSON-friendly types.

    Parameters
    ----------
    obj
        Object to convert.
    str_keys
        Whether to coerce mapping keys to strings.

    Returns
    -------
    object
        Builtin-friendly representation.
    """
    return msgspec.to_builtins(obj, str_keys=str_keys, enc_hook=_json_enc_hook)


__all__ = [
    "JSON_DECODER",
    "JSON_ENCODER",
    "StructBaseStrict",
    "convert",
    "decode_json_lines",
    "dumps_json",
    "encode_json_lines",
    "loads_json",
    "to_builtins",
    "validation_error_payload",
]
