"""
Unit tests for Morse-grid images
"""

import pytest

from pixelcloak import morse
from pixelcloak.errors import (
    AuthenticationFailure, CorruptPayload, EmptyPayload, FormatError, InputMissing,
)
from pixelcloak.surface import blank, load, to_image
from pixelcloak.utils import bytes_to_hex


class TestLayout:

    def test_single_characters(self):
        assert morse.layout("e") == [[1]]
        assert morse.layout("a") == [[1, 0, 1, 1, 1]]

    def test_character_gap(self):
        assert morse.layout("ee") == [[1, 0, 0, 0, 1]]

    def test_rows_never_exceed_width(self):
        rows = morse.layout("0123456789abcdef" * 20)
        assert len(rows) > 1
        assert all(len(row) <= morse.UNITS_PER_ROW for row in rows)

    def test_uppercase_accepted(self):
        assert morse.layout("AB") == morse.layout("ab")

    def test_non_hex_rejected(self):
        with pytest.raises(FormatError):
            morse.layout("xyz")


class TestRenderAndScan:

    def test_geometry(self):
        surface = morse.render("0" * 40)
        rows = len(morse.layout("0" * 40))
        assert surface.width == 400
        assert surface.height == rows * 4 + (rows - 1) * 8
        assert morse.capacity_bits(surface) == rows * 100

    def test_read_hex_round_trip(self):
        hex_string = "0123456789abcdef" * 20
        assert morse.read_hex(morse.render(hex_string)) == hex_string

    def test_dah_dit_shapes(self):
        surface = morse.render("b")
        assert morse.scan(surface)[0][:7].tolist() == [True, True, True, False, True, False, True]

    def test_blank_grid(self):
        with pytest.raises(EmptyPayload):
            morse.read_hex(blank(400, 4, morse.BACKGROUND_COLOR))

    def test_invalid_symbol_width(self):
        surface = blank(400, 4, morse.BACKGROUND_COLOR)
        surface.rgba[:, 0:8, :3] = 0
        with pytest.raises(CorruptPayload):
            morse.read_hex(surface)

    def test_unknown_sequence(self):
        # six dits is not a hex digit
        surface = morse.render("5")
        surface.rgba[:, 40:44, :3] = 0
        with pytest.raises(CorruptPayload):
            morse.read_hex(surface)


@pytest.fixture(scope="module")
def encoded():
    return morse.encode("Morse message", "correct-horse")


class TestMorse:

    def test_intermediate_is_payload_hex(self, encoded):
        assert encoded.intermediate == bytes_to_hex(encoded.encrypted_payload.encode('utf-8'))

    def test_decode_image(self, encoded, password):
        assert morse.decode(encoded.surface, password) == "Morse message"

    def test_decode_png_bytes(self, encoded, password):
        assert morse.decode(load(to_image(encoded.surface)), password) == "Morse message"

    def test_decode_intermediate(self, encoded, password):
        assert morse.decode(encoded.intermediate.upper(), password) == "Morse message"

    def test_wrong_password(self, encoded):
        with pytest.raises(AuthenticationFailure):
            morse.decode(encoded.intermediate, "wrong")

    def test_odd_hex(self, password):
        with pytest.raises(FormatError):
            morse.decode_hex("abc", password)

    def test_hex_not_utf8(self, password):
        with pytest.raises(CorruptPayload):
            morse.decode_hex("fffe", password)

    def test_missing_inputs(self, password):
        with pytest.raises(InputMissing):
            morse.decode(None, password)
        with pytest.raises(InputMissing):
            morse.encode("", password)
