"""
serializer.py
Provides utility functions for serializing and deserializing event payloads to/from JSON.
Used by csv_io.py to store payloads in a single transcript column.
"""

import json
from typing import Any


def _default(o: Any):
    if isinstance(o, (bytes, bytearray)):
        return o.hex()
    return getattr(o, '__dict__', str(o))


def dumps(obj: Any) -> str:
    """
    Serialize a Python object (including dataclasses and bytes) to a JSON string.
    Bytes are written as lowercase hex, the same form shown to the player.
    Args:
        obj: Object to serialize.
    Returns:
        str: JSON string.
    """
    return json.dumps(obj, default=_default, sort_keys=True)


def loads(s: str):
    """
    Deserialize a JSON string to a Python object (dict/list).
    Args:
        s (str): JSON string.
    Returns:
        object: Deserialized Python object.
    """
    return json.loads(s)
