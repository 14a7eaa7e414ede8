"""
Shared encode pipeline and LSB embedding/extraction primitives
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .crypto import encrypt
from .errors import (
    CapacityExceeded, CorruptPayload, EmptyPayload, InputMissing,
    MessageTooLong, TerminatorNotFound,
)
from .surface import PixelSurface
from .utils import (
    TERMINATOR, array_to_bits, bits_to_array, bits_to_text, find_terminator,
    text_to_bits,
)

logger = logging.getLogger(__name__)

# Practical limit on message length; the real limit depends on the carrier
MAX_MESSAGE_LENGTH_CHARS = 5000

CHANNELS_PER_PIXEL = 3  # alpha is never touched


@dataclass
class EncodeResult:
    """
    Output of an encode operation.

    Attributes:
        surface: stego image (mutated copy of the carrier, or synthesized)
        encrypted_payload: the salt:iv:ciphertext envelope that was embedded
        intermediate: binary (Random-Dot) or hex (Morse) form usable instead
            of the image when decoding; None for LSB schemes
    """

    surface: PixelSurface
    encrypted_payload: str
    intermediate: Optional[str] = None


def check_message(message: str, password: str):
    if not message:
        raise InputMissing("message")
    if not password:
        raise InputMissing("password")
    if len(message) > MAX_MESSAGE_LENGTH_CHARS:
        raise MessageTooLong(
            f"Message is too long. Maximum {MAX_MESSAGE_LENGTH_CHARS} characters allowed."
        )


def prepare_bits(message: str, password: str) -> Tuple[str, str]:
    """
    Encrypt a message and serialize it for embedding.

    Returns:
        (encrypted_payload, payload bits followed by the terminator)
    """
    check_message(message, password)
    encrypted_payload = encrypt(message, password)
    return encrypted_payload, text_to_bits(encrypted_payload) + TERMINATOR


def payload_from_bits(bits: str) -> str:
    """Turn pre-terminator bits back into the payload string."""
    if not bits:
        raise EmptyPayload("No content found before the message terminator.")
    text = bits_to_text(bits)
    if not text:
        raise CorruptPayload(
            "Failed to convert extracted binary data to text. Data might be corrupted."
        )
    return text


def split_at_terminator(bits: str) -> str:
    """Return the bits preceding the first terminator."""
    index = find_terminator(bits)
    if index == -1:
        raise TerminatorNotFound(
            f"No hidden message found. The terminator was not detected after scanning "
            f"{len(bits)} bits."
        )
    if index == 0:
        raise EmptyPayload("Only the message terminator sequence was detected.")
    return bits[:index]


def capacity_bits(surface: PixelSurface) -> int:
    """Number of embeddable bits in a carrier (alpha excluded)."""
    return surface.num_pixels * CHANNELS_PER_PIXEL


def channel_indices(num_pixels: int, order: np.ndarray = None) -> np.ndarray:
    """
    Flat RGBA offsets of every R, G, B byte in visiting order.

    Args:
        num_pixels: pixel count of the carrier
        order: pixel visiting order; sequential when None
    """
    if order is None:
        order = np.arange(num_pixels, dtype=np.int64)
    return (order[:, None] * 4 + np.arange(CHANNELS_PER_PIXEL)).ravel()


def embed_bits(surface: PixelSurface, bits: str, order: np.ndarray = None) -> PixelSurface:
    """
    Write bits into the channel LSBs of a copy of the carrier.

    Args:
        surface: carrier, left untouched
        bits: '0'/'1' string to embed
        order: pixel visiting order; sequential when None

    Returns:
        New surface holding the embedded bits
    """
    available = capacity_bits(surface)
    if len(bits) > available:
        raise CapacityExceeded(
            f"Data too large: {len(bits)} bits required, "
            f"but only {available} bits available"
        )

    stego = surface.copy()
    flat = stego.rgba.reshape(-1)
    targets = channel_indices(surface.num_pixels, order)[:len(bits)]
    flat[targets] = (flat[targets] & 0xFE) | bits_to_array(bits)

    logger.debug("Embedded %d bits into %dx%d carrier", len(bits), surface.width, surface.height)
    return stego


def extract_bits(surface: PixelSurface, order: np.ndarray = None) -> str:
    """Read every channel LSB in visiting order."""
    flat = surface.rgba.reshape(-1)
    return array_to_bits(flat[channel_indices(surface.num_pixels, order)] & 1)
