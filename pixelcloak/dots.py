"""
Random-Dot images

Each payload bit becomes a filled square on a freshly sized canvas: black
for 1, white for 0, laid out row-major. Decoding samples the centre pixel
of every grid cell.
"""

import logging
import math

import numpy as np

from .core import EncodeResult, payload_from_bits, prepare_bits, split_at_terminator
from .crypto import decrypt
from .errors import FormatError, InputMissing
from .surface import PixelSurface, blank
from .utils import TERMINATOR, array_to_bits, find_terminator, is_binary_string

logger = logging.getLogger(__name__)

DOT_SIZE = 5  # pixels
DOT_SPACING = 2  # pixels between dots
DOTS_PER_ROW = 48
COLOR_BIT_1 = (0, 0, 0)
COLOR_BIT_0 = (255, 255, 255)
BACKGROUND_COLOR = (0xE0, 0xE0, 0xE0)

CELL = DOT_SIZE + DOT_SPACING


def render(bits: str) -> PixelSurface:
    """Draw one dot per bit."""
    num_rows = math.ceil(len(bits) / DOTS_PER_ROW)
    width = DOTS_PER_ROW * CELL + DOT_SPACING
    height = num_rows * CELL + DOT_SPACING

    canvas = blank(width, height, BACKGROUND_COLOR)
    for i, bit in enumerate(bits):
        row, col = divmod(i, DOTS_PER_ROW)
        x = DOT_SPACING + col * CELL
        y = DOT_SPACING + row * CELL
        canvas.rgba[y:y + DOT_SIZE, x:x + DOT_SIZE, :3] = COLOR_BIT_1 if bit == '1' else COLOR_BIT_0

    logger.debug("Rendered %d dots on a %dx%d canvas", len(bits), width, height)
    return canvas


def grid_shape(surface: PixelSurface):
    """(rows, cols) of dot cells that fit the surface."""
    rows = (surface.height - DOT_SPACING) // CELL
    cols = (surface.width - DOT_SPACING) // CELL
    return max(rows, 0), max(cols, 0)


def capacity_bits(surface: PixelSurface) -> int:
    rows, cols = grid_shape(surface)
    return rows * cols


def sample(surface: PixelSurface) -> str:
    """Read the dot grid back into a bit string."""
    rows, cols = grid_shape(surface)
    if rows == 0 or cols == 0:
        raise FormatError("Image is too small or not in the expected Random-Dot format.")

    offset = DOT_SPACING + DOT_SIZE // 2
    ys = offset + CELL * np.arange(rows)
    xs = offset + CELL * np.arange(cols)
    centres = surface.rgba[ys][:, xs, :3].astype(np.int32)
    intensity = centres.sum(axis=2) / 3
    return array_to_bits(intensity.ravel() < 128)


def encode(message: str, password: str, surface: PixelSurface = None, key: str = None) -> EncodeResult:
    """
    Encrypt a message and render it as a dot grid.

    The carrier argument is ignored; the canvas is sized from the payload.
    The returned intermediate is the full bit string including terminator.
    """
    encrypted_payload, bits = prepare_bits(message, password)
    return EncodeResult(surface=render(bits), encrypted_payload=encrypted_payload, intermediate=bits)


def decode_bits(bits: str, password: str) -> str:
    """Decrypt a message from the binary string produced by encode()."""
    if not bits:
        raise InputMissing("binary string")
    if not password:
        raise InputMissing("password")

    bits = ''.join(bits.split())
    if not is_binary_string(bits):
        raise FormatError("Input contains non-binary characters.")

    if find_terminator(bits) == -1 and TERMINATOR in bits:
        raise FormatError("Binary payload is not a multiple of 8 bits. Data might be incomplete.")
    return decrypt(payload_from_bits(split_at_terminator(bits)), password)


def decode(artifact, password: str, key: str = None) -> str:
    """
    Decrypt a message from a dot image or from its binary string.

    Args:
        artifact: PixelSurface or the intermediate binary string
        password: encryption password
    """
    if artifact is None:
        raise InputMissing("image")
    if isinstance(artifact, str):
        return decode_bits(artifact, password)
    if not password:
        raise InputMissing("password")

    payload_bits = split_at_terminator(sample(artifact))
    return decrypt(payload_from_bits(payload_bits), password)
