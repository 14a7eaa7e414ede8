"""
Tests for the cloak command line interface
"""

import pytest

import cloak
from pixelcloak.hashes import md5
from pixelcloak.utils import bytes_to_base64


@pytest.fixture
def prompts(monkeypatch):
    """Answer getpass prompts from a queue; defaults to the test password."""
    answers = []

    def fake_getpass(prompt=''):
        return answers.pop(0) if answers else "correct-horse"

    monkeypatch.setattr("getpass.getpass", fake_getpass)
    return answers


class TestCli:

    def test_no_command_prints_help(self, capsys):
        assert cloak.main([]) == 0
        assert "usage" in capsys.readouterr().out

    def test_hash_single(self, capsys):
        assert cloak.main(["hash", "password", "-a", "md5"]) == 0
        assert capsys.readouterr().out.strip() == "5f4dcc3b5aa765d61d8327deb882cf99"

    def test_hash_all(self, capsys):
        assert cloak.main(["hash", "abc"]) == 0
        out = capsys.readouterr().out
        assert "md2" in out and "sha512" in out

    def test_hide_and_extract(self, prompts, carrier_file, tmp_path, capsys):
        output = str(tmp_path / "stego.png")
        assert cloak.main(["hide", "cli secret", carrier_file, "-o", output]) == 0
        assert cloak.main(["extract", output]) == 0
        assert "Message: cli secret" in capsys.readouterr().out

    def test_hide_with_pattern_key(self, prompts, carrier_file, tmp_path, capsys):
        output = str(tmp_path / "stego.png")
        prompts.extend(["pw", "pw", "my key"])
        assert cloak.main(["hide", "keyed", carrier_file, "-o", output, "-s", "pattern_lsb"]) == 0
        prompts.extend(["pw", "my key"])
        assert cloak.main(["extract", output, "-s", "pattern_lsb"]) == 0
        assert "Message: keyed" in capsys.readouterr().out

    def test_password_mismatch(self, prompts, carrier_file, capsys):
        prompts.extend(["one", "two"])
        assert cloak.main(["hide", "msg", carrier_file]) == 1
        assert "Passwords do not match" in capsys.readouterr().err

    def test_wrong_password(self, prompts, carrier_file, tmp_path, capsys):
        output = str(tmp_path / "stego.png")
        cloak.main(["hide", "msg", carrier_file, "-o", output])
        prompts.append("wrong")
        assert cloak.main(["extract", output]) == 1
        assert "wrong password or corrupted data" in capsys.readouterr().err

    def test_render_and_extract_intermediate(self, prompts, tmp_path, capsys):
        image = str(tmp_path / "morse.png")
        hex_file = str(tmp_path / "morse.hex")
        assert cloak.main(["render", "tap tap", "morse", "-o", image,
                           "--intermediate-out", hex_file]) == 0
        assert cloak.main(["extract", hex_file, "-s", "morse", "--intermediate"]) == 0
        assert cloak.main(["extract", image, "-s", "morse"]) == 0
        assert capsys.readouterr().out.count("Message: tap tap") == 2

    def test_capacity(self, carrier_file, capsys):
        assert cloak.main(["capacity", carrier_file]) == 0
        assert "3.66 KB" in capsys.readouterr().out

    def test_crack_dictionary(self, tmp_path, capsys):
        wordlist = tmp_path / "words.txt"
        wordlist.write_text("foo\nhunter2\nbar\n")
        assert cloak.main(["crack", "dictionary", md5("hunter2"), str(wordlist), "-q"]) == 0
        assert "Password: hunter2" in capsys.readouterr().out

    def test_crack_bruteforce_not_found(self, capsys):
        assert cloak.main(["crack", "bruteforce", md5("zz"), "--custom", "ab",
                           "--max-length", "1"]) == 2
        assert "not found" in capsys.readouterr().out

    def test_crack_rainbow(self, capsys):
        assert cloak.main(["crack", "rainbow", md5("x")]) == 1
        assert "not feasible" in capsys.readouterr().err

    def test_crack_too_large(self, capsys):
        assert cloak.main(["crack", "bruteforce", md5("x"), "--lower", "--max-length", "3",
                           "--max-combinations", "100", "-q"]) == 1
        assert "too high" in capsys.readouterr().err

    def test_autodecode_text(self, prompts, capsys):
        prompts.append("")
        text = bytes_to_base64(b"plain words")
        assert cloak.main(["autodecode", text, "--text"]) == 0
        assert "Message: plain words" in capsys.readouterr().out
