"""
Pixel surfaces: RGBA buffers backed by numpy, read and written with Pillow
"""

import io
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

import numpy as np
from PIL import Image, UnidentifiedImageError

from .errors import FormatError

# Lossless formats that keep LSB data intact
SUPPORTED_FORMATS = {'PNG', 'BMP'}
DEFAULT_OUTPUT_FORMAT = 'PNG'


@dataclass
class PixelSurface:
    """
    A flat RGBA carrier.

    Attributes:
        width: width in pixels
        height: height in pixels
        rgba: uint8 array of shape (height, width, 4)
    """

    width: int
    height: int
    rgba: np.ndarray

    @property
    def num_pixels(self) -> int:
        return self.width * self.height

    def copy(self) -> "PixelSurface":
        return PixelSurface(self.width, self.height, self.rgba.copy())

    @classmethod
    def from_array(cls, pixels: np.ndarray) -> "PixelSurface":
        """Build a surface from an (h, w, 3) or (h, w, 4) uint8 array."""
        pixels = np.asarray(pixels, dtype=np.uint8)
        if pixels.ndim != 3 or pixels.shape[2] not in (3, 4):
            raise FormatError(f"Expected an RGB or RGBA pixel array, got shape {pixels.shape}")
        if pixels.shape[2] == 3:
            alpha = np.full(pixels.shape[:2] + (1,), 255, dtype=np.uint8)
            pixels = np.concatenate([pixels, alpha], axis=2)
        height, width = pixels.shape[:2]
        return cls(width, height, np.ascontiguousarray(pixels))


def blank(width: int, height: int, color: Tuple[int, int, int]) -> PixelSurface:
    """Opaque surface filled with a single colour."""
    rgba = np.empty((height, width, 4), dtype=np.uint8)
    rgba[:, :, :3] = color
    rgba[:, :, 3] = 255
    return PixelSurface(width, height, rgba)


def _from_pil(img: Image.Image) -> PixelSurface:
    if img.mode != 'RGBA':
        img = img.convert('RGBA')
    return PixelSurface.from_array(np.array(img))


def load(data: bytes) -> PixelSurface:
    """Decode image bytes into an RGBA surface."""
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise FormatError(f"Could not decode image data: {e}") from e
    return _from_pil(img)


def to_image(surface: PixelSurface) -> bytes:
    """Encode a surface as PNG bytes."""
    buffer = io.BytesIO()
    Image.fromarray(surface.rgba).save(buffer, format=DEFAULT_OUTPUT_FORMAT)
    return buffer.getvalue()


def open_image(image_path: str) -> PixelSurface:
    """Load an image file as an RGBA surface."""
    with open(image_path, 'rb') as f:
        return load(f.read())


def save_image(surface: PixelSurface, output_path: str) -> str:
    """
    Save a surface to disk.

    Lossy or unknown extensions are replaced with .png since compression
    would destroy the embedded bits.

    Returns:
        The path actually written
    """
    ext = Path(output_path).suffix.upper().lstrip('.')

    if ext not in SUPPORTED_FORMATS:
        ext = DEFAULT_OUTPUT_FORMAT
        output_path = str(Path(output_path).with_suffix('.png'))

    img = Image.fromarray(surface.rgba)
    if ext == 'BMP':
        # BMP drops the alpha channel
        img = img.convert('RGB')
    img.save(output_path, format=ext)
    return output_path
