"""
Unit tests for LSB, Pattern-LSB and MD5-Pattern-LSB
"""

import os

import numpy as np
import pytest

from pixelcloak.core import (
    MAX_MESSAGE_LENGTH_CHARS, capacity_bits, embed_bits, extract_bits,
)
from pixelcloak.crypto import decrypt
from pixelcloak.errors import (
    AuthenticationFailure, CapacityExceeded, CloakError, EmptyPayload, InputMissing,
    MessageTooLong, TerminatorNotFound,
)
from pixelcloak.image import (
    decode_lsb, decode_md5_pattern, decode_pattern, encode_lsb, encode_md5_pattern,
    encode_pattern, extract_from_image, extract_raw, get_image_capacity, hide_in_image,
    hide_raw, md5_pattern_order, pattern_order,
)
from pixelcloak.surface import PixelSurface, load, open_image, to_image
from pixelcloak.utils import TERMINATOR, text_to_bits


class TestEmbedding:

    def test_capacity_excludes_alpha(self, carrier):
        assert capacity_bits(carrier) == 100 * 100 * 3

    def test_embed_and_extract_bits(self, carrier):
        stego = embed_bits(carrier, "1011001")
        assert extract_bits(stego)[:7] == "1011001"

    def test_only_lowest_bit_changes(self, carrier):
        bits = "1" * 3000
        stego = embed_bits(carrier, bits)
        diff = stego.rgba.astype(int) - carrier.rgba.astype(int)
        assert np.abs(diff).max() <= 1
        assert np.array_equal(stego.rgba[:, :, 3], carrier.rgba[:, :, 3])

    def test_embed_with_order(self, carrier):
        order = np.arange(carrier.num_pixels)[::-1].copy()
        stego = embed_bits(carrier, "111", order)
        # last pixel, RGB channels
        assert (stego.rgba[-1, -1, :3] & 1).tolist() == [1, 1, 1]
        assert extract_bits(stego, order)[:3] == "111"

    def test_embed_too_many_bits(self, tiny_carrier):
        with pytest.raises(CapacityExceeded):
            embed_bits(tiny_carrier, "0" * 301)


class TestLSB:

    def test_round_trip(self, carrier, password):
        result = encode_lsb("hi", password, carrier)
        assert result.intermediate is None
        assert decrypt(result.encrypted_payload, password) == "hi"
        assert decode_lsb(result.surface, password) == "hi"

    def test_carrier_left_untouched(self, carrier, password):
        before = carrier.rgba.copy()
        encode_lsb("hi", password, carrier)
        assert np.array_equal(carrier.rgba, before)

    def test_wrong_password(self, carrier, password):
        stego = encode_lsb("hi", password, carrier).surface
        with pytest.raises(AuthenticationFailure):
            decode_lsb(stego, "wrong")

    def test_capacity_exceeded_leaves_carrier_unmodified(self, tiny_carrier, password):
        before = tiny_carrier.rgba.copy()
        with pytest.raises(CapacityExceeded):
            encode_lsb("hi", password, tiny_carrier)
        assert np.array_equal(tiny_carrier.rgba, before)

    def test_survives_png_bytes(self, carrier, password):
        stego = encode_lsb("Secret message", password, carrier).surface
        assert decode_lsb(load(to_image(stego)), password) == "Secret message"

    def test_unicode_message(self, carrier, password):
        stego = encode_lsb("pässwörd🔑", password, carrier).surface
        assert decode_lsb(stego, password) == "pässwörd🔑"

    def test_no_hidden_message(self, carrier, password):
        with pytest.raises(TerminatorNotFound):
            decode_lsb(carrier, password)

    def test_only_terminator(self, password):
        black = PixelSurface.from_array(np.zeros((20, 20, 3), dtype=np.uint8))
        with pytest.raises(EmptyPayload):
            decode_lsb(black, password)

    def test_missing_inputs(self, carrier, password):
        with pytest.raises(InputMissing):
            encode_lsb("", password, carrier)
        with pytest.raises(InputMissing):
            encode_lsb("hi", "", carrier)
        with pytest.raises(InputMissing):
            encode_lsb("hi", password, None)
        with pytest.raises(InputMissing):
            decode_lsb(carrier, "")

    def test_message_length_limit(self, carrier, password):
        with pytest.raises(MessageTooLong):
            encode_lsb("x" * (MAX_MESSAGE_LENGTH_CHARS + 1), password, carrier)


class TestRawPayload:

    def test_round_trip_without_encryption(self, carrier):
        stego = hide_raw(carrier, "plain:text")
        assert extract_raw(stego) == "plain:text"

    def test_raw_layout(self, carrier):
        stego = hide_raw(carrier, "A")
        assert extract_bits(stego)[:48] == text_to_bits("A") + TERMINATOR


class TestPatternSchemes:

    def test_pattern_round_trip(self, carrier, password):
        stego = encode_pattern("hi", password, carrier, key="stego key").surface
        assert decode_pattern(stego, password, key="stego key") == "hi"

    def test_md5_pattern_round_trip(self, carrier, password):
        stego = encode_md5_pattern("hi", password, carrier, key="stego key").surface
        assert decode_md5_pattern(stego, password, key="stego key") == "hi"

    def test_orders_differ_between_schemes(self, carrier):
        assert not np.array_equal(pattern_order(carrier, "secret"),
                                  md5_pattern_order(carrier, "secret"))

    def test_pattern_is_not_sequential(self, carrier, password):
        stego = encode_pattern("hi", password, carrier, key="stego key").surface
        with pytest.raises(CloakError):
            decode_lsb(stego, password)

    def test_wrong_key(self, carrier, password):
        stego = encode_pattern("hi", password, carrier, key="stego key").surface
        with pytest.raises(CloakError):
            decode_pattern(stego, password, key="other key")

    def test_key_required(self, carrier, password):
        with pytest.raises(InputMissing):
            encode_pattern("hi", password, carrier)
        with pytest.raises(InputMissing):
            decode_md5_pattern(carrier, password, key="")

    def test_capacity_checked_before_shuffle(self, tiny_carrier, password):
        with pytest.raises(CapacityExceeded):
            encode_md5_pattern("hi", password, tiny_carrier, key="k")


class TestImageFiles:

    def test_hide_and_extract(self, carrier_file, password):
        output = hide_in_image(carrier_file, "file message", password)
        assert os.path.basename(output) == "_carrier.png"
        assert extract_from_image(output, password) == "file message"

    def test_lossy_extension_becomes_png(self, carrier_file, tmp_path, password):
        output = hide_in_image(carrier_file, "msg", password, str(tmp_path / "out.jpg"),
                               encoder=encode_pattern, key="k")
        assert output.endswith("out.png")
        assert extract_from_image(output, password, decoder=decode_pattern, key="k") == "msg"

    def test_bmp_output(self, carrier_file, tmp_path, password):
        output = hide_in_image(carrier_file, "bmp", password, str(tmp_path / "out.bmp"))
        assert output.endswith(".bmp")
        assert open_image(output).width == 100
        assert extract_from_image(output, password) == "bmp"

    def test_capacity(self, carrier_file):
        assert get_image_capacity(carrier_file) == (30000 - 40) // 8
