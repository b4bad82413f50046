import base64
import binascii
from typing import Optional

from secure_finance.db.core import EncodingError


# ===== OPAQUE FIELD CODEC =====
# Encrypted payloads are stored as raw bytes and travel as Base64 text.
# Nothing here looks at the plaintext.

def decode_opaque(value: Optional[str], field_name: str = "value") -> Optional[bytes]:
    """Decode a Base64 transport string into the bytes that get stored"""
    if value is None:
        return None
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise EncodingError(f"{field_name} is not valid Base64: {e}")


def encode_opaque(value: Optional[bytes]) -> Optional[str]:
    """Encode stored bytes for transport"""
    if value is None:
        return None
    return base64.b64encode(value).decode("ascii")


def bytes_to_hex(value: bytes) -> str:
    return value.hex().upper()
