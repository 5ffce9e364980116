from __future__ import annotations
import base64
import binascii
from typing import Tuple

from .errors import MalformedRecordError

SEPARATOR = ","


def check_key(key: str) -> None:
    # the first separator ends the key on decode
    if SEPARATOR in key:
        raise ValueError(f"key must not contain {SEPARATOR!r}: {key!r}")


def encode_record(key: str, value: str) -> str:
    """
    Encode one (key, value) pair as a single newline-free ASCII line.
    The whole "key,value" string is base64'd, so commas, newlines and
    multi-byte text in the value never clash with the log framing.
    Keys may not contain the separator.
    """
    check_key(key)
    raw = f"{key}{SEPARATOR}{value}".encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def decode_record(line: str) -> Tuple[str, str]:
    """
    Inverse of encode_record. Splits on the first separator only, so the
    value may itself contain commas.
    """
    try:
        raw = base64.b64decode(line.strip(), validate=True)
        text = raw.decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise MalformedRecordError(f"cannot decode record: {e}") from e
    parts = text.split(SEPARATOR, 1)
    if len(parts) != 2:
        raise MalformedRecordError("record has no key/value separator")
    return parts[0], parts[1]
