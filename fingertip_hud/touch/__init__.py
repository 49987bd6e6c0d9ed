"""
Touch Module - Remote pad samples and their payload format.
"""

from .messages import TouchMessageError, TouchSample, decode_touch_message, encode_touch_message

__all__ = [
    'TouchMessageError',
    'TouchSample',
    'decode_touch_message',
    'encode_touch_message',
]
