"""
Hash library

MD2, MD4, MD5 and SHA-224 are implemented here directly; SHA-1/256/384/512
come from hashlib. All digests are returned as lowercase hex.
"""

import hashlib
import struct
from enum import Enum
from typing import Dict, Union

from .errors import FormatError

MASK32 = 0xFFFFFFFF


class Algorithm(Enum):
    MD2 = "md2"
    MD4 = "md4"
    MD5 = "md5"
    SHA1 = "sha1"
    SHA224 = "sha224"
    SHA256 = "sha256"
    SHA384 = "sha384"
    SHA512 = "sha512"


ALGORITHMS = list(Algorithm)


def _to_bytes(data: Union[str, bytes]) -> bytes:
    if isinstance(data, str):
        return data.encode('utf-8')
    return bytes(data)


def _rotl(value: int, count: int) -> int:
    value &= MASK32
    return ((value << count) | (value >> (32 - count))) & MASK32


def _rotr(value: int, count: int) -> int:
    return ((value >> count) | (value << (32 - count))) & MASK32


def _md_pad(data: bytes, byteorder: str) -> bytes:
    """MD4/MD5/SHA-2 style padding: 0x80, zeros, 64-bit bit length."""
    bit_length = (len(data) * 8) & 0xFFFFFFFFFFFFFFFF
    padding = b'\x80' + b'\x00' * ((55 - len(data)) % 64)
    length_format = '<Q' if byteorder == 'little' else '>Q'
    return data + padding + struct.pack(length_format, bit_length)


# -- MD2 (RFC 1319) ---------------------------------------------------------

_MD2_S = (
    41, 46, 67, 201, 162, 216, 124, 1, 61, 54, 84, 161, 236, 240, 6, 19,
    98, 167, 5, 243, 192, 199, 115, 140, 152, 147, 43, 217, 188, 76, 130, 202,
    30, 155, 87, 60, 253, 212, 224, 22, 103, 66, 111, 24, 138, 23, 229, 18,
    190, 78, 196, 214, 218, 158, 222, 73, 160, 251, 245, 142, 187, 47, 238, 122,
    169, 104, 121, 145, 21, 178, 7, 63, 148, 194, 16, 137, 11, 34, 95, 33,
    128, 127, 93, 154, 90, 144, 50, 39, 53, 62, 204, 231, 191, 247, 151, 3,
    255, 25, 48, 179, 72, 165, 181, 209, 215, 94, 146, 42, 172, 86, 170, 198,
    79, 184, 56, 210, 150, 164, 125, 182, 118, 252, 107, 226, 156, 116, 4, 241,
    69, 157, 112, 89, 100, 113, 135, 32, 134, 91, 207, 101, 230, 45, 168, 2,
    27, 96, 37, 173, 174, 176, 185, 246, 28, 70, 97, 105, 52, 64, 126, 15,
    85, 71, 163, 35, 221, 81, 175, 58, 195, 92, 249, 206, 186, 197, 234, 38,
    44, 83, 13, 110, 133, 40, 132, 9, 211, 223, 205, 244, 65, 129, 77, 82,
    106, 220, 55, 200, 108, 193, 171, 250, 36, 225, 123, 8, 12, 189, 177, 74,
    120, 136, 149, 139, 227, 99, 232, 109, 233, 203, 213, 254, 59, 0, 29, 57,
    242, 239, 183, 14, 102, 88, 208, 228, 166, 119, 114, 248, 235, 117, 75, 10,
    49, 68, 80, 180, 143, 237, 31, 26, 219, 153, 141, 51, 159, 17, 131, 20,
)


def md2(data: Union[str, bytes]) -> str:
    message = bytearray(_to_bytes(data))
    pad = 16 - len(message) % 16
    message.extend([pad] * pad)

    checksum = [0] * 16
    last = 0
    for offset in range(0, len(message), 16):
        for j in range(16):
            checksum[j] ^= _MD2_S[message[offset + j] ^ last]
            last = checksum[j]
    message.extend(checksum)

    state = [0] * 48
    for offset in range(0, len(message), 16):
        for j in range(16):
            state[16 + j] = message[offset + j]
            state[32 + j] = state[16 + j] ^ state[j]
        t = 0
        for round_no in range(18):
            for k in range(48):
                state[k] ^= _MD2_S[t]
                t = state[k]
            t = (t + round_no) % 256
    return bytes(state[:16]).hex()


# -- MD4 (RFC 1320) ---------------------------------------------------------

_MD4_ROUND2_ORDER = (0, 4, 8, 12, 1, 5, 9, 13, 2, 6, 10, 14, 3, 7, 11, 15)
_MD4_ROUND3_ORDER = (0, 8, 4, 12, 2, 10, 6, 14, 1, 9, 5, 13, 3, 11, 7, 15)


def md4(data: Union[str, bytes]) -> str:
    message = _md_pad(_to_bytes(data), 'little')
    h = [0x67452301, 0xEFCDAB89, 0x98BADCFE, 0x10325476]

    for offset in range(0, len(message), 64):
        x = struct.unpack('<16I', message[offset:offset + 64])
        a, b, c, d = h

        # Each step updates the first register, then the registers rotate
        # so the next step updates what was previously the last one.
        for i in range(16):
            f = (b & c) | (~b & d)
            a = _rotl(a + f + x[i], (3, 7, 11, 19)[i % 4])
            a, b, c, d = d, a, b, c
        for i in range(16):
            g = (b & c) | (b & d) | (c & d)
            a = _rotl(a + g + x[_MD4_ROUND2_ORDER[i]] + 0x5A827999, (3, 5, 9, 13)[i % 4])
            a, b, c, d = d, a, b, c
        for i in range(16):
            a = _rotl(a + (b ^ c ^ d) + x[_MD4_ROUND3_ORDER[i]] + 0x6ED9EBA1, (3, 9, 11, 15)[i % 4])
            a, b, c, d = d, a, b, c

        h = [(v + w) & MASK32 for v, w in zip(h, (a, b, c, d))]

    return struct.pack('<4I', *h).hex()


# -- MD5 (RFC 1321) ---------------------------------------------------------

_MD5_K = (
    0xd76aa478, 0xe8c7b756, 0x242070db, 0xc1bdceee, 0xf57c0faf, 0x4787c62a, 0xa8304613, 0xfd469501,
    0x698098d8, 0x8b44f7af, 0xffff5bb1, 0x895cd7be, 0x6b901122, 0xfd987193, 0xa679438e, 0x49b40821,
    0xf61e2562, 0xc040b340, 0x265e5a51, 0xe9b6c7aa, 0xd62f105d, 0x02441453, 0xd8a1e681, 0xe7d3fbc8,
    0x21e1cde6, 0xc33707d6, 0xf4d50d87, 0x455a14ed, 0xa9e3e905, 0xfcefa3f8, 0x676f02d9, 0x8d2a4c8a,
    0xfffa3942, 0x8771f681, 0x6d9d6122, 0xfde5380c, 0xa4beea44, 0x4bdecfa9, 0xf6bb4b60, 0xbebfbc70,
    0x289b7ec6, 0xeaa127fa, 0xd4ef3085, 0x04881d05, 0xd9d4d039, 0xe6db99e5, 0x1fa27cf8, 0xc4ac5665,
    0xf4292244, 0x432aff97, 0xab9423a7, 0xfc93a039, 0x655b59c3, 0x8f0ccc92, 0xffeff47d, 0x85845dd1,
    0x6fa87e4f, 0xfe2ce6e0, 0xa3014314, 0x4e0811a1, 0xf7537e82, 0xbd3af235, 0x2ad7d2bb, 0xeb86d391,
)

_MD5_SHIFTS = (7, 12, 17, 22) * 4 + (5, 9, 14, 20) * 4 + (4, 11, 16, 23) * 4 + (6, 10, 15, 21) * 4


def md5(data: Union[str, bytes]) -> str:
    message = _md_pad(_to_bytes(data), 'little')
    h = [0x67452301, 0xEFCDAB89, 0x98BADCFE, 0x10325476]

    for offset in range(0, len(message), 64):
        x = struct.unpack('<16I', message[offset:offset + 64])
        a, b, c, d = h
        for i in range(64):
            if i < 16:
                f = (b & c) | (~b & d)
                g = i
            elif i < 32:
                f = (d & b) | (~d & c)
                g = (5 * i + 1) % 16
            elif i < 48:
                f = b ^ c ^ d
                g = (3 * i + 5) % 16
            else:
                f = c ^ (b | ~d)
                g = (7 * i) % 16
            f = (f + a + _MD5_K[i] + x[g]) & MASK32
            a, d, c = d, c, b
            b = (b + _rotl(f, _MD5_SHIFTS[i])) & MASK32
        h = [(v + w) & MASK32 for v, w in zip(h, (a, b, c, d))]

    return struct.pack('<4I', *h).hex()


# -- SHA-224 (FIPS 180-4) ---------------------------------------------------

_SHA2_K = (
    0x428a2f98, 0x71374491, 0xb5c0fbcf, 0xe9b5dba5, 0x3956c25b, 0x59f111f1, 0x923f82a4, 0xab1c5ed5,
    0xd807aa98, 0x12835b01, 0x243185be, 0x550c7dc3, 0x72be5d74, 0x80deb1fe, 0x9bdc06a7, 0xc19bf174,
    0xe49b69c1, 0xefbe4786, 0x0fc19dc6, 0x240ca1cc, 0x2de92c6f, 0x4a7484aa, 0x5cb0a9dc, 0x76f988da,
    0x983e5152, 0xa831c66d, 0xb00327c8, 0xbf597fc7, 0xc6e00bf3, 0xd5a79147, 0x06ca6351, 0x14292967,
    0x27b70a85, 0x2e1b2138, 0x4d2c6dfc, 0x53380d13, 0x650a7354, 0x766a0abb, 0x81c2c92e, 0x92722c85,
    0xa2bfe8a1, 0xa81a664b, 0xc24b8b70, 0xc76c51a3, 0xd192e819, 0xd6990624, 0xf40e3585, 0x106aa070,
    0x19a4c116, 0x1e376c08, 0x2748774c, 0x34b0bcb5, 0x391c0cb3, 0x4ed8aa4a, 0x5b9cca4f, 0x682e6ff3,
    0x748f82ee, 0x78a5636f, 0x84c87814, 0x8cc70208, 0x90befffa, 0xa4506ceb, 0xbef9a3f7, 0xc67178f2,
)

_SHA224_IV = (0xc1059ed8, 0x367cd507, 0x3070dd17, 0xf70e5939,
              0xffc00b31, 0x68581511, 0x64f98fa7, 0xbefa4fa4)


def _sha256_compress(h: list, block: bytes) -> list:
    w = list(struct.unpack('>16I', block))
    for i in range(16, 64):
        s0 = _rotr(w[i - 15], 7) ^ _rotr(w[i - 15], 18) ^ (w[i - 15] >> 3)
        s1 = _rotr(w[i - 2], 17) ^ _rotr(w[i - 2], 19) ^ (w[i - 2] >> 10)
        w.append((w[i - 16] + s0 + w[i - 7] + s1) & MASK32)

    a, b, c, d, e, f, g, hh = h
    for i in range(64):
        big_s1 = _rotr(e, 6) ^ _rotr(e, 11) ^ _rotr(e, 25)
        ch = (e & f) ^ (~e & g)
        temp1 = (hh + big_s1 + ch + _SHA2_K[i] + w[i]) & MASK32
        big_s0 = _rotr(a, 2) ^ _rotr(a, 13) ^ _rotr(a, 22)
        maj = (a & b) ^ (a & c) ^ (b & c)
        temp2 = (big_s0 + maj) & MASK32
        hh, g, f, e, d, c, b, a = g, f, e, (d + temp1) & MASK32, c, b, a, (temp1 + temp2) & MASK32

    return [(v + w_) & MASK32 for v, w_ in zip(h, (a, b, c, d, e, f, g, hh))]


def sha224(data: Union[str, bytes]) -> str:
    message = _md_pad(_to_bytes(data), 'big')
    h = list(_SHA224_IV)
    for offset in range(0, len(message), 64):
        h = _sha256_compress(h, message[offset:offset + 64])
    return struct.pack('>7I', *h[:7]).hex()


def _hashlib_digest(name: str):
    def digest_fn(data: Union[str, bytes]) -> str:
        return hashlib.new(name, _to_bytes(data)).hexdigest()
    digest_fn.__name__ = name
    return digest_fn


sha1 = _hashlib_digest('sha1')
sha256 = _hashlib_digest('sha256')
sha384 = _hashlib_digest('sha384')
sha512 = _hashlib_digest('sha512')

_DIGESTS = {
    Algorithm.MD2: md2,
    Algorithm.MD4: md4,
    Algorithm.MD5: md5,
    Algorithm.SHA1: sha1,
    Algorithm.SHA224: sha224,
    Algorithm.SHA256: sha256,
    Algorithm.SHA384: sha384,
    Algorithm.SHA512: sha512,
}


def digest(algorithm: Union[Algorithm, str], data: Union[str, bytes]) -> str:
    """
    Compute a digest of text (UTF-8 encoded) or bytes.

    Args:
        algorithm: Algorithm member or its name, e.g. "md5" or "SHA-256"
        data: input text or bytes

    Returns:
        Lowercase hex digest
    """
    if not isinstance(algorithm, Algorithm):
        name = str(algorithm).lower().replace('-', '').replace('_', '')
        try:
            algorithm = Algorithm(name)
        except ValueError:
            raise FormatError(f"Unsupported hash algorithm: {algorithm}") from None
    return _DIGESTS[algorithm](data)


def digest_all(data: Union[str, bytes]) -> Dict[str, str]:
    """Every supported digest of the input, keyed by algorithm name."""
    return {algorithm.value: _DIGESTS[algorithm](data) for algorithm in ALGORITHMS}
