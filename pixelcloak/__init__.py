"""
PixelCloak - hide encrypted messages in images and crack MD5 hashes
"""

from .crypto import encrypt, decrypt
from .hashes import Algorithm, digest, digest_all
from .image import (
    encode_lsb, decode_lsb, encode_pattern, decode_pattern,
    encode_md5_pattern, decode_md5_pattern, hide_in_image, extract_from_image,
    get_image_capacity,
)
from .schemes import Scheme, auto_decode
from .cracker import crack_dictionary, crack_brute_force, crack_candidates, total_combinations

__version__ = "1.0.0"
__all__ = [
    "encrypt",
    "decrypt",
    "Algorithm",
    "digest",
    "digest_all",
    "encode_lsb",
    "decode_lsb",
    "encode_pattern",
    "decode_pattern",
    "encode_md5_pattern",
    "decode_md5_pattern",
    "hide_in_image",
    "extract_from_image",
    "get_image_capacity",
    "Scheme",
    "auto_decode",
    "crack_dictionary",
    "crack_brute_force",
    "crack_candidates",
    "total_combinations",
]
