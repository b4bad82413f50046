from typing import Any

from secure_finance.db.opaque import encode_opaque, bytes_to_hex


def to_base64(value: Any) -> Any:
    """Used by response models: stored bytes go out as Base64 text"""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return encode_opaque(bytes(value))
    return value


def to_hex(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes_to_hex(bytes(value))
    return value
