"""
Morse-grid images

The encrypted payload is hex encoded and every hex digit is drawn as Morse
code on a grid of fixed-size units: a dit is one black unit, a dah three,
elements are separated by one white unit and characters by three. A
character never straddles two rows, so a row end also separates
characters.
"""

import logging
from typing import List

import numpy as np

from .core import EncodeResult, check_message
from .crypto import decrypt, encrypt
from .errors import CorruptPayload, EmptyPayload, FormatError, InputMissing
from .surface import PixelSurface, blank
from .utils import bytes_to_hex, hex_to_bytes

logger = logging.getLogger(__name__)

UNIT_SIZE = 4  # pixels per grid unit
DIT_UNITS = 1
DAH_UNITS = 3
ELEM_GAP_UNITS = 1
CHAR_GAP_UNITS = 3
UNITS_PER_ROW = 100
LINE_SPACING = UNIT_SIZE * 2
BACKGROUND_COLOR = (0xF0, 0xF0, 0xF0)
FOREGROUND_COLOR = (0, 0, 0)

ROW_PITCH = UNIT_SIZE + LINE_SPACING

MORSE_CODE_MAP = {
    '0': '-----', '1': '.----', '2': '..---', '3': '...--', '4': '....-',
    '5': '.....', '6': '-....', '7': '--...', '8': '---..', '9': '----.',
    'a': '.-', 'b': '-...', 'c': '-.-.', 'd': '-..', 'e': '.', 'f': '..-.',
}

REVERSE_MORSE_CODE_MAP = {code: char for char, code in MORSE_CODE_MAP.items()}


def _char_units(char: str) -> List[int]:
    units = []
    for i, symbol in enumerate(MORSE_CODE_MAP[char]):
        if i:
            units.extend([0] * ELEM_GAP_UNITS)
        units.extend([1] * (DAH_UNITS if symbol == '-' else DIT_UNITS))
    return units


def layout(hex_string: str) -> List[List[int]]:
    """Lay hex digits out as rows of black (1) / white (0) units."""
    rows = [[]]
    for char in hex_string.lower():
        if char not in MORSE_CODE_MAP:
            raise FormatError(f"Not a hex digit: {char!r}")
        units = _char_units(char)
        row = rows[-1]
        if row and len(row) + CHAR_GAP_UNITS + len(units) > UNITS_PER_ROW:
            row = []
            rows.append(row)
        if row:
            row.extend([0] * CHAR_GAP_UNITS)
        row.extend(units)
    return rows


def render(hex_string: str) -> PixelSurface:
    rows = layout(hex_string)
    width = UNITS_PER_ROW * UNIT_SIZE
    height = len(rows) * UNIT_SIZE + max(0, len(rows) - 1) * LINE_SPACING

    canvas = blank(width, height, BACKGROUND_COLOR)
    for r, row in enumerate(rows):
        y = r * ROW_PITCH
        for u in np.flatnonzero(row):
            x = int(u) * UNIT_SIZE
            canvas.rgba[y:y + UNIT_SIZE, x:x + UNIT_SIZE, :3] = FOREGROUND_COLOR

    logger.debug("Rendered %d hex digits in %d Morse rows", len(hex_string), len(rows))
    return canvas


def capacity_bits(surface: PixelSurface) -> int:
    """Number of grid units the surface holds."""
    rows = (surface.height + LINE_SPACING) // ROW_PITCH
    return rows * (surface.width // UNIT_SIZE)


def scan(surface: PixelSurface) -> List[np.ndarray]:
    """Sample every unit centre; one boolean array (True = black) per row."""
    half = UNIT_SIZE // 2
    xs = np.arange(half, surface.width, UNIT_SIZE)
    xs = xs[xs - half + UNIT_SIZE <= surface.width]
    rows = []
    for y in range(half, surface.height, ROW_PITCH):
        centres = surface.rgba[y, xs, :3].astype(np.int32)
        rows.append(centres.sum(axis=1) / 3 < 128)
    return rows


def _row_codes(row: np.ndarray) -> List[str]:
    codes = []
    current = ''
    i = 0
    while i < len(row):
        start = i
        colour = row[i]
        while i < len(row) and row[i] == colour:
            i += 1
        run = i - start
        if colour:
            if run == DIT_UNITS:
                current += '.'
            elif run == DAH_UNITS:
                current += '-'
            else:
                raise CorruptPayload("Morse decode: detected invalid symbol shape.")
        elif run >= CHAR_GAP_UNITS and current:
            codes.append(current)
            current = ''
    if current:
        codes.append(current)
    return codes


def read_hex(surface: PixelSurface) -> str:
    """Reconstruct the hex string drawn on a Morse grid."""
    hex_chars = []
    for row in scan(surface):
        for code in _row_codes(row):
            char = REVERSE_MORSE_CODE_MAP.get(code)
            if char is None:
                raise CorruptPayload(f"Morse decode: no hex digit for Morse sequence {code!r}.")
            hex_chars.append(char)
    if not hex_chars:
        raise EmptyPayload("Morse decode: no Morse characters found in the image.")
    return ''.join(hex_chars)


def encode(message: str, password: str, surface: PixelSurface = None, key: str = None) -> EncodeResult:
    """
    Encrypt a message and draw it as a Morse grid.

    The carrier argument is ignored. The returned intermediate is the hex
    string, usable with decode_hex() in place of the image.
    """
    check_message(message, password)
    encrypted_payload = encrypt(message, password)
    hex_string = bytes_to_hex(encrypted_payload.encode('utf-8'))
    return EncodeResult(surface=render(hex_string), encrypted_payload=encrypted_payload,
                        intermediate=hex_string)


def decode_hex(hex_string: str, password: str) -> str:
    """Decrypt a message from the hex string produced by encode()."""
    if not hex_string:
        raise InputMissing("hex string")
    if not password:
        raise InputMissing("password")

    data = hex_to_bytes(''.join(hex_string.split()))
    try:
        payload = data.decode('utf-8')
    except UnicodeDecodeError as e:
        raise CorruptPayload("Hex data does not decode to a valid payload string.") from e
    return decrypt(payload, password)


def decode(artifact, password: str, key: str = None) -> str:
    """
    Decrypt a message from a Morse image or from its hex string.

    Args:
        artifact: PixelSurface or the intermediate hex string
        password: encryption password
    """
    if artifact is None:
        raise InputMissing("image")
    if isinstance(artifact, str):
        return decode_hex(artifact, password)
    if not password:
        raise InputMissing("password")
    return decode_hex(read_hex(artifact), password)
