"""Streaming checksums for published artifacts.

Digests are rendered the way Gradle Module Metadata producers have always
rendered them: the digest bytes are read as an unsigned big-endian integer
and printed in base 16, so leading zero nibbles are dropped.
"""

import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterable, Union

from maven_gmm.errors import ChecksumError, UnsupportedAlgorithmError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 4096

# Accepted spellings mapped to hashlib names
ALGORITHMS = {
    "md5": "md5",
    "sha1": "sha1",
    "sha-1": "sha1",
    "sha256": "sha256",
    "sha-256": "sha256",
    "sha512": "sha512",
    "sha-512": "sha512",
}

# Order in which checksums appear in a files entry
ARTIFACT_ALGORITHMS = ("sha512", "sha256", "sha1", "md5")

Source = Union[str, Path, BinaryIO]


@dataclass(frozen=True)
class HashValue:
    """A computed digest."""

    digest: bytes

    def as_int(self) -> int:
        return int.from_bytes(self.digest, "big")

    def as_hex_string(self) -> str:
        """Return the digest in lowercase hex without zero padding."""
        return format(self.as_int(), "x")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HashValue):
            return NotImplemented
        return self.as_int() == other.as_int()

    def __hash__(self) -> int:
        return hash(self.as_int())

    def __str__(self) -> str:
        return self.as_hex_string()


def normalize_algorithm(algorithm: str) -> str:
    """Map an algorithm identifier such as ``SHA-256`` to its hashlib name."""
    try:
        return ALGORITHMS[algorithm.strip().lower()]
    except KeyError:
        raise UnsupportedAlgorithmError(algorithm) from None


def _update_all(stream: BinaryIO, digests: list) -> None:
    while True:
        chunk = stream.read(CHUNK_SIZE)
        if not chunk:
            break
        for digest in digests:
            digest.update(chunk)


def create_hashes(source: Source, algorithms: Iterable[str] = ARTIFACT_ALGORITHMS) -> dict[str, HashValue]:
    """Hash ``source`` with several algorithms in a single read pass.

    Args:
        source: A file path or a readable binary stream. Streams are read to
            the end but not closed.
        algorithms: Algorithm identifiers (MD5, SHA-1, SHA-256, SHA-512).

    Returns:
        Mapping of normalized algorithm name (``md5``, ``sha1``, ...) to value.

    Raises:
        UnsupportedAlgorithmError: An algorithm is not supported.
        ChecksumError: The source could not be read.
    """
    names = [normalize_algorithm(algorithm) for algorithm in algorithms]
    digests = [hashlib.new(name) for name in names]

    if isinstance(source, (str, Path)):
        path = Path(source)
        logger.debug(f"Hashing {path} with {', '.join(names)}")
        try:
            with path.open("rb") as stream:
                _update_all(stream, digests)
        except OSError as e:
            raise ChecksumError(str(path), e) from e
    else:
        try:
            _update_all(source, digests)
        except OSError as e:
            raise ChecksumError(getattr(source, "name", "<stream>"), e) from e

    return {name: HashValue(digest.digest()) for name, digest in zip(names, digests)}


def create_hash(source: Source, algorithm: str) -> HashValue:
    """Hash ``source`` with a single algorithm."""
    return next(iter(create_hashes(source, [algorithm]).values()))


def md5(path: Union[str, Path]) -> HashValue:
    return create_hash(path, "md5")


def sha1(path: Union[str, Path]) -> HashValue:
    return create_hash(path, "sha1")


def sha256(path: Union[str, Path]) -> HashValue:
    return create_hash(path, "sha256")


def sha512(path: Union[str, Path]) -> HashValue:
    return create_hash(path, "sha512")
