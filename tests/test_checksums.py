"""Tests for artifact checksums."""

import hashlib
import io

import pytest

from maven_gmm.checksums import (
    CHUNK_SIZE,
    HashValue,
    create_hash,
    create_hashes,
    md5,
    normalize_algorithm,
    sha1,
    sha256,
    sha512,
)
from maven_gmm.errors import ChecksumError, ConfigurationError, UnsupportedAlgorithmError


EMPTY_DIGESTS = {
    "md5": "d41d8cd98f00b204e9800998ecf8427e",
    "sha1": "da39a3ee5e6b4b0d3255bfef95601890afd80709",
    "sha256": "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855",
    "sha512": (
        "cf83e1357eefb8bdf1542850d66d8007d620e4050b5715dc83f4a921d36ce9ce"
        "47d0d13c5d85f2b0ff8318d2877eec2f63b931bd47417a81a538327af927da3e"
    ),
}


def unpadded(algorithm: str, data: bytes) -> str:
    return format(int(hashlib.new(algorithm, data).hexdigest(), 16), "x")


class TestHashValue:
    """Tests for digest rendering."""

    def test_hex_string_is_lowercase(self):
        assert HashValue(bytes([0xAB, 0xCD])).as_hex_string() == "abcd"

    def test_leading_zero_nibbles_are_dropped(self):
        assert HashValue(bytes([0x00, 0x0F, 0xAB])).as_hex_string() == "fab"

    def test_all_zero_digest(self):
        assert HashValue(bytes(16)).as_hex_string() == "0"

    def test_equality_compares_numeric_value(self):
        assert HashValue(b"\x00\x01") == HashValue(b"\x01")
        assert HashValue(b"\x01") != HashValue(b"\x02")
        assert len({HashValue(b"\x00\x01"), HashValue(b"\x01")}) == 1

    def test_str_is_hex(self):
        assert str(HashValue(b"\x10")) == "10"


class TestAlgorithms:
    """Tests for algorithm identifiers."""

    @pytest.mark.parametrize(
        "identifier,expected",
        [
            ("MD5", "md5"),
            ("SHA-1", "sha1"),
            ("sha1", "sha1"),
            ("SHA-256", "sha256"),
            ("SHA-512", "sha512"),
            (" sha512 ", "sha512"),
        ],
    )
    def test_normalize(self, identifier, expected):
        assert normalize_algorithm(identifier) == expected

    def test_unknown_algorithm_is_configuration_error(self, tmp_path):
        artifact = tmp_path / "a.jar"
        artifact.write_bytes(b"x")

        with pytest.raises(UnsupportedAlgorithmError) as excinfo:
            create_hash(artifact, "sha3-256")

        assert isinstance(excinfo.value, ConfigurationError)
        assert excinfo.value.algorithm == "sha3-256"


class TestCreateHashes:
    """Tests for streaming file hashing."""

    def test_empty_file_has_well_known_digests(self, tmp_path):
        empty = tmp_path / "empty.jar"
        empty.write_bytes(b"")

        hashes = create_hashes(empty, ["md5", "sha1", "sha256", "sha512"])

        assert {name: value.as_hex_string() for name, value in hashes.items()} == EMPTY_DIGESTS

    def test_single_helpers_match_hashlib(self, tmp_path):
        artifact = tmp_path / "example-0.1.jar"
        artifact.write_bytes(b"*")

        assert md5(artifact).as_hex_string() == unpadded("md5", b"*")
        assert sha1(artifact).as_hex_string() == unpadded("sha1", b"*")
        assert sha256(artifact).as_hex_string() == unpadded("sha256", b"*")
        assert sha512(artifact).as_hex_string() == unpadded("sha512", b"*")

    def test_file_larger_than_chunk(self, tmp_path):
        data = bytes(range(256)) * (CHUNK_SIZE // 64)
        artifact = tmp_path / "big.jar"
        artifact.write_bytes(data)

        hashes = create_hashes(artifact)

        assert list(hashes) == ["sha512", "sha256", "sha1", "md5"]
        for name, value in hashes.items():
            assert value.as_hex_string() == unpadded(name, data)

    def test_stream_source(self):
        stream = io.BytesIO(b"hello world")

        value = create_hash(stream, "SHA-256")

        assert value.as_hex_string() == unpadded("sha256", b"hello world")
        assert not stream.closed

    def test_missing_file_raises_checksum_error(self, tmp_path):
        missing = tmp_path / "missing.jar"

        with pytest.raises(ChecksumError) as excinfo:
            create_hashes(missing)

        assert str(missing) in str(excinfo.value)

    def test_directory_raises_checksum_error(self, tmp_path):
        with pytest.raises(ChecksumError):
            create_hash(tmp_path, "md5")
