"""
Remote touch pad samples and their wire payload.

A touch sample is a normalized (u, v) position on a remote pad plus the Unix time it
was taken. Payloads are JSON objects tagged with a kind and schema version:

    {"kind": "pad-coordinates", "version": 1, "x": 0.25, "y": 0.8, "t": 1718000000.5}

Untagged legacy payloads `{"x": ..., "y": ..., "t": ...}` are read as version 0; their
values may be numeric strings.
"""

import json
import logging
import math
from dataclasses import dataclass

from fingertip_hud.config import TouchConfig
from fingertip_hud.utils.coords import clamp01

logger = logging.getLogger(__name__)

LEGACY_VERSION = 0


class TouchMessageError(ValueError):
    """Raised when a touch payload cannot be decoded."""


@dataclass(frozen=True)
class TouchSample:
    u: float
    v: float
    t: float = 0.0
    " Unix-epoch seconds. "

    def clamped(self):
        return TouchSample(clamp01(self.u), clamp01(self.v), self.t)


def _number(payload, key):
    if key not in payload:
        raise TouchMessageError(f"touch payload is missing '{key}'")
    value = payload[key]
    if isinstance(value, bool):
        raise TouchMessageError(f"'{key}' must be a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise TouchMessageError(f"'{key}' must be a number, got {value!r}") from e
    if not math.isfinite(number):
        raise TouchMessageError(f"'{key}' must be finite, got {value!r}")
    return number


def decode_touch_message(message):
    """
    Decode a touch payload into a clamped `TouchSample`.

    Args:
        message: JSON text, UTF-8 bytes, or an already parsed dict

    Returns:
        TouchSample: The decoded sample with u and v clamped to [0, 1]

    Raises:
        TouchMessageError: If the payload is malformed, of another kind, or of an
                           unsupported version
    """
    if isinstance(message, (bytes, bytearray)):
        try:
            message = message.decode("utf-8")
        except UnicodeDecodeError as e:
            raise TouchMessageError(f"touch payload is not UTF-8: {e}") from e
    if isinstance(message, str):
        try:
            message = json.loads(message)
        except json.JSONDecodeError as e:
            raise TouchMessageError(f"touch payload is not JSON: {e}") from e
    if not isinstance(message, dict):
        raise TouchMessageError(f"touch payload must be an object, got {type(message).__name__}")

    if "kind" in message or "version" in message:
        kind = message.get("kind")
        if kind != TouchConfig.PAYLOAD_KIND:
            raise TouchMessageError(f"unexpected payload kind {kind!r}")
        version = message.get("version")
        if version != TouchConfig.SCHEMA_VERSION:
            raise TouchMessageError(f"unsupported touch schema version {version!r}")
    else:
        version = LEGACY_VERSION

    sample = TouchSample(_number(message, "x"), _number(message, "y"), _number(message, "t"))
    if version == LEGACY_VERSION:
        logger.debug("Decoded legacy touch payload")
    return sample.clamped()


def encode_touch_message(sample):
    """
    Encode a touch sample as a current-version JSON payload.
    """
    return json.dumps({
        "kind": TouchConfig.PAYLOAD_KIND,
        "version": TouchConfig.SCHEMA_VERSION,
        "x": sample.u,
        "y": sample.v,
        "t": sample.t,
    })
