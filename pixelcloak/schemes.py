"""
Uniform access to the five steganographic schemes

Every scheme exposes encode(message, password, carrier, key),
decode(artifact, password, key) and capacity_bits(carrier). The Scheme enum
selects one; the helpers here dispatch, turn errors into typed results and
run the universal decoder.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, NamedTuple, Optional, Union

from . import core, dots, image, morse
from .core import EncodeResult
from .crypto import decrypt
from .errors import CloakError, InputMissing
from .surface import PixelSurface
from .utils import base64_to_bytes, bits_to_text, hex_to_bytes, is_binary_string

logger = logging.getLogger(__name__)


class Scheme(Enum):
    LSB = "lsb"
    PATTERN_LSB = "pattern_lsb"
    MD5_PATTERN = "md5_pattern"
    RANDOM_DOT = "rd"
    MORSE = "morse"


class Codec(NamedTuple):
    name: str
    encode: Callable[..., EncodeResult]
    decode: Callable[..., str]
    capacity_bits: Callable[[PixelSurface], int]
    requires_key: bool = False
    synthetic: bool = False


CODECS = {
    Scheme.LSB: Codec("LSB", image.encode_lsb, image.decode_lsb, core.capacity_bits),
    Scheme.PATTERN_LSB: Codec("Pattern LSB", image.encode_pattern, image.decode_pattern,
                              core.capacity_bits, requires_key=True),
    Scheme.MD5_PATTERN: Codec("MD5 Pattern", image.encode_md5_pattern, image.decode_md5_pattern,
                              core.capacity_bits, requires_key=True),
    Scheme.RANDOM_DOT: Codec("RD Pattern", dots.encode, dots.decode, dots.capacity_bits,
                             synthetic=True),
    Scheme.MORSE: Codec("Morse Pattern", morse.encode, morse.decode, morse.capacity_bits,
                        synthetic=True),
}

# Order the universal decoder tries image schemes in
AUTO_DECODE_ORDER = [
    Scheme.LSB, Scheme.RANDOM_DOT, Scheme.MORSE, Scheme.PATTERN_LSB, Scheme.MD5_PATTERN,
]


def get_codec(scheme: Union[Scheme, str]) -> Codec:
    return CODECS[Scheme(scheme)]


def encode(scheme: Union[Scheme, str], message: str, password: str,
           carrier: PixelSurface = None, key: str = None) -> EncodeResult:
    return get_codec(scheme).encode(message, password, carrier, key)


def decode(scheme: Union[Scheme, str], artifact, password: str, key: str = None) -> str:
    return get_codec(scheme).decode(artifact, password, key)


def capacity_bits(scheme: Union[Scheme, str], carrier: PixelSurface) -> int:
    return get_codec(scheme).capacity_bits(carrier)


@dataclass
class ProcessResult:
    """Outcome of an encode or decode attempt, success or not."""

    success: bool
    message: Optional[str] = None
    result: Optional[EncodeResult] = None
    error: Optional[CloakError] = None


def try_encode(scheme, message: str, password: str, carrier: PixelSurface = None,
               key: str = None) -> ProcessResult:
    try:
        result = encode(scheme, message, password, carrier, key)
    except CloakError as e:
        return ProcessResult(success=False, message=e.message, error=e)
    return ProcessResult(success=True, result=result)


def try_decode(scheme, artifact, password: str, key: str = None) -> ProcessResult:
    try:
        message = decode(scheme, artifact, password, key)
    except CloakError as e:
        return ProcessResult(success=False, message=e.message, error=e)
    return ProcessResult(success=True, message=message)


@dataclass
class LogEntry:
    method: str
    result: str  # 'Success', 'Failed' or 'Skipped'
    details: str


@dataclass
class AnalysisReport:
    decoding_log: List[LogEntry] = field(default_factory=list)
    final_result: Optional[str] = None
    detected_method: Optional[str] = None

    def log(self, method: str, result: str, details: str):
        self.decoding_log.append(LogEntry(method, result, details[:150]))


def _decode_text_formats(text: str, report: AnalysisReport):
    formats = [
        ("Base64", lambda t: base64_to_bytes(t).decode('utf-8')),
        ("Hex", lambda t: hex_to_bytes(t).decode('utf-8')),
        ("Binary", lambda t: bits_to_text(t) if is_binary_string(t) else ''),
    ]
    for name, decode_fn in formats:
        try:
            decoded = decode_fn(text)
        except (CloakError, UnicodeDecodeError):
            decoded = ''
        if decoded.strip():
            report.log(name, 'Success', 'Text decoded successfully.')
            report.final_result = decoded
            report.detected_method = name
            return
        report.log(name, 'Failed', f'Not valid {name}.')


def auto_decode(surface: PixelSurface = None, text: str = None, password: str = None,
                key: str = None) -> AnalysisReport:
    """
    Try every decoding method and report what happened.

    An image is tried against each scheme in AUTO_DECODE_ORDER; keyed
    schemes are skipped without a key. Text is tried as an encrypted
    envelope first (when a password is given), then as base64, hex and
    binary. Decode failures are recorded in the report, never raised.
    """
    if surface is None and not text:
        raise InputMissing("image or text")

    report = AnalysisReport()

    if surface is not None:
        if not password:
            raise InputMissing("password")
        for scheme in AUTO_DECODE_ORDER:
            codec = CODECS[scheme]
            if codec.requires_key and not key:
                report.log(codec.name, 'Skipped', 'Stego Key not provided.')
                continue
            outcome = try_decode(scheme, surface, password, key)
            if outcome.success:
                report.log(codec.name, 'Success', 'Message decrypted successfully.')
                report.final_result = outcome.message
                report.detected_method = codec.name
                return report
            logger.debug("Auto-detect: %s failed", codec.name)
            report.log(codec.name, 'Failed', outcome.message)
        return report

    text = text.strip()
    if password:
        try:
            report.final_result = decrypt(text, password)
        except CloakError as e:
            report.log('AES-GCM Decryption', 'Failed', e.message)
        else:
            report.log('AES-GCM Decryption', 'Success', 'Payload decrypted successfully.')
            report.detected_method = 'AES-GCM Decryption'
            return report
    else:
        report.log('AES-GCM Decryption', 'Skipped', 'No password provided.')

    _decode_text_formats(text, report)
    return report
