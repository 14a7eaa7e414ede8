# PixelCloak test configuration and shared fixtures

import os
import sys

import numpy as np
import pytest

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

pytest_plugins = ['pytest_asyncio']

from pixelcloak.surface import PixelSurface  # noqa: E402

PASSWORD = "correct-horse"


@pytest.fixture
def password():
    return PASSWORD


@pytest.fixture
def carrier():
    """100x100 RGB carrier with some structure in every channel."""
    img_array = np.zeros((100, 100, 3), dtype=np.uint8)
    img_array[:, :, 0] = 255  # Red channel
    img_array[25:75, 25:75, 1] = 255  # Green square
    img_array[:, :, 2] = np.arange(100, dtype=np.uint8)[None, :]
    return PixelSurface.from_array(img_array)


@pytest.fixture
def tiny_carrier():
    """10x10 carrier, far too small for an encrypted payload."""
    return PixelSurface.from_array(np.full((10, 10, 3), 200, dtype=np.uint8))


@pytest.fixture
def carrier_file(tmp_path, carrier):
    from PIL import Image

    path = tmp_path / "carrier.png"
    Image.fromarray(carrier.rgba[:, :, :3], 'RGB').save(str(path))
    return str(path)
