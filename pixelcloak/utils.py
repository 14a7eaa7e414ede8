"""
Bit serialization and encoding helpers
"""

import base64
import binascii
import logging

import numpy as np

from .errors import FormatError

logger = logging.getLogger(__name__)

# Five zero bytes mark the end of an embedded payload
TERMINATOR = "00000000" * 5


def bytes_to_bits(data: bytes) -> str:
    """Convert bytes to a '0'/'1' string, most significant bit first."""
    return ''.join(format(byte, '08b') for byte in data)


def bits_to_bytes(bits: str) -> bytes:
    """
    Convert a '0'/'1' string back to bytes.

    Trailing bits that do not fill a whole byte are dropped.
    """
    valid_length = len(bits) // 8 * 8
    if valid_length != len(bits):
        logger.warning(
            "Bit string has invalid length %d, truncating to %d", len(bits), valid_length
        )
    result = bytearray()
    for i in range(0, valid_length, 8):
        result.append(int(bits[i:i + 8], 2))
    return bytes(result)


def text_to_bits(text: str) -> str:
    """Convert text to its UTF-8 bit string."""
    return bytes_to_bits(text.encode('utf-8'))


def bits_to_text(bits: str) -> str:
    """
    Convert a UTF-8 bit string back to text.

    Returns an empty string when the bytes are not valid UTF-8 so callers
    can report corruption themselves.
    """
    data = bits_to_bytes(bits)
    if not data:
        return ''
    try:
        return data.decode('utf-8')
    except UnicodeDecodeError:
        logger.warning("Bit string does not decode to valid UTF-8")
        return ''


def bytes_to_hex(data: bytes) -> str:
    return data.hex()


def hex_to_bytes(hex_string: str) -> bytes:
    if len(hex_string) % 2 != 0:
        raise FormatError("Hex string must have an even number of characters")
    try:
        return bytes.fromhex(hex_string)
    except ValueError as e:
        raise FormatError(f"Invalid hex string: {e}") from e


def bytes_to_base64(data: bytes) -> str:
    return base64.b64encode(data).decode('ascii')


def base64_to_bytes(text: str) -> bytes:
    try:
        return base64.b64decode(text.encode('ascii'), validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise FormatError(f"Invalid base64 data: {e}") from e


def bits_to_array(bits: str) -> np.ndarray:
    """Convert a '0'/'1' string to a uint8 array of 0/1 values."""
    return np.frombuffer(bits.encode('ascii'), dtype=np.uint8) - ord('0')


def array_to_bits(values: np.ndarray) -> str:
    """Convert an array of 0/1 values to a '0'/'1' string."""
    return (np.asarray(values, dtype=np.uint8) + ord('0')).tobytes().decode('ascii')


def find_terminator(bits: str) -> int:
    """
    Return the bit offset of the first byte-aligned terminator, or -1.
    """
    index = bits.find(TERMINATOR)
    while index != -1 and index % 8 != 0:
        index = bits.find(TERMINATOR, (index // 8 + 1) * 8)
    return index


def is_binary_string(text: str) -> bool:
    return bool(text) and set(text) <= {'0', '1'}


def format_size(size_bytes: int) -> str:
    """Format bytes to human-readable string."""
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size_bytes < 1024:
            return f"{size_bytes:.2f} {unit}"
        size_bytes /= 1024
    return f"{size_bytes:.2f} TB"
