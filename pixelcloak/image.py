"""
Image steganography: LSB, Pattern-LSB and MD5-Pattern-LSB

All three write one bit into the least significant bit of each R, G, B
byte. They differ only in the order pixels are visited: sequential for
LSB, a key-seeded shuffle for the pattern variants.
"""

import logging
from pathlib import Path
from typing import Optional

import numpy as np

from .core import (
    EncodeResult, capacity_bits, embed_bits, extract_bits, payload_from_bits,
    prepare_bits, split_at_terminator,
)
from .crypto import decrypt
from .errors import CapacityExceeded, InputMissing
from .shuffle import seed_from_key, seed_from_key_md5, shuffle
from .surface import PixelSurface, open_image, save_image
from .utils import TERMINATOR, format_size, text_to_bits

logger = logging.getLogger(__name__)


def _require_surface(surface: Optional[PixelSurface]):
    if surface is None:
        raise InputMissing("image")


def _require_key(key: Optional[str]):
    if not key:
        raise InputMissing("stego key")


def pattern_order(surface: PixelSurface, key: str) -> np.ndarray:
    """Pixel visiting order for Pattern-LSB."""
    seed = seed_from_key(key)
    logger.debug("Pattern-LSB seed derived")
    return shuffle(surface.num_pixels, seed)


def md5_pattern_order(surface: PixelSurface, key: str) -> np.ndarray:
    """Pixel visiting order for MD5-Pattern-LSB."""
    seed = seed_from_key_md5(key)
    logger.debug("MD5-Pattern seed derived")
    return shuffle(surface.num_pixels, seed)


def _encode(message: str, password: str, surface: PixelSurface, order_fn=None,
            key: str = None) -> EncodeResult:
    _require_surface(surface)
    encrypted_payload, bits = prepare_bits(message, password)

    # Check capacity before paying for the shuffle
    available = capacity_bits(surface)
    if len(bits) > available:
        raise CapacityExceeded(
            "Encrypted message is too long to be hidden in this image. "
            f"{len(bits)} bits required, {available} available. Try a larger image "
            "or a shorter message (encryption adds overhead)."
        )

    order = order_fn(surface, key) if order_fn else None
    stego = embed_bits(surface, bits, order)
    return EncodeResult(surface=stego, encrypted_payload=encrypted_payload)


def _extract_payload(surface: PixelSurface, order: np.ndarray = None) -> str:
    bits = extract_bits(surface, order)
    return payload_from_bits(split_at_terminator(bits))


def hide_raw(surface: PixelSurface, payload: str) -> PixelSurface:
    """
    Embed an already prepared payload string with sequential LSB.

    No encryption is performed.
    """
    _require_surface(surface)
    if not payload:
        raise InputMissing("payload")
    return embed_bits(surface, text_to_bits(payload) + TERMINATOR)


def extract_raw(surface: PixelSurface) -> str:
    """Return the sequential-LSB payload string without decrypting it."""
    _require_surface(surface)
    return _extract_payload(surface)


def encode_lsb(message: str, password: str, surface: PixelSurface, key: str = None) -> EncodeResult:
    """
    Encrypt a message and hide it with sequential LSB.

    Args:
        message: secret text
        password: encryption password
        surface: carrier image, left unmodified
        key: unused, accepted for a uniform signature

    Returns:
        EncodeResult holding the stego surface
    """
    return _encode(message, password, surface)


def decode_lsb(surface: PixelSurface, password: str, key: str = None) -> str:
    if not password:
        raise InputMissing("password")
    return decrypt(extract_raw(surface), password)


def encode_pattern(message: str, password: str, surface: PixelSurface, key: str = None) -> EncodeResult:
    """Hide a message along a pixel order seeded by the stego key's string hash."""
    _require_key(key)
    return _encode(message, password, surface, pattern_order, key)


def decode_pattern(surface: PixelSurface, password: str, key: str = None) -> str:
    _require_surface(surface)
    _require_key(key)
    if not password:
        raise InputMissing("password")
    return decrypt(_extract_payload(surface, pattern_order(surface, key)), password)


def encode_md5_pattern(message: str, password: str, surface: PixelSurface, key: str = None) -> EncodeResult:
    """Hide a message along a pixel order seeded by the stego key's MD5 digest."""
    _require_key(key)
    return _encode(message, password, surface, md5_pattern_order, key)


def decode_md5_pattern(surface: PixelSurface, password: str, key: str = None) -> str:
    _require_surface(surface)
    _require_key(key)
    if not password:
        raise InputMissing("password")
    return decrypt(_extract_payload(surface, md5_pattern_order(surface, key)), password)


def get_image_capacity(image_path: str) -> int:
    """
    Get maximum data capacity of an image in bytes.

    The terminator is already subtracted.
    """
    surface = open_image(image_path)
    return max(0, (capacity_bits(surface) - len(TERMINATOR)) // 8)


def hide_in_image(image_path: str, message: str, password: str, output_path: str = None,
                  encoder=encode_lsb, key: str = None) -> str:
    """
    Hide a message in an image file.

    Args:
        image_path: path to host image
        message: secret text
        password: encryption password
        output_path: output image path (default: _<name>.png next to the input)
        encoder: one of encode_lsb, encode_pattern, encode_md5_pattern
        key: stego key for the pattern encoders

    Returns:
        Path to output image
    """
    surface = open_image(image_path)
    result = encoder(message, password, surface, key)

    if output_path is None:
        base = Path(image_path)
        output_path = str(base.parent / f"_{base.stem}.png")

    saved_path = save_image(result.surface, output_path)
    logger.info("Hid %s of encrypted payload in %s",
                format_size(len(result.encrypted_payload)), saved_path)
    return saved_path


def extract_from_image(image_path: str, password: str, decoder=decode_lsb, key: str = None) -> str:
    """Extract and decrypt a message from an image file."""
    return decoder(open_image(image_path), password, key)
