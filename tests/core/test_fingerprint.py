import hashlib
from pathlib import Path

import pytest

from smart_backup.configuration.backup_config import BackupSettings
from smart_backup.core.fingerprint import ContentFingerprinter, normalize_algorithm


def test_bytes_fingerprint_is_sha256_hex() -> None:
    fp = ContentFingerprinter()
    assert fp.fingerprint_bytes(b"A") == hashlib.sha256(b"A").hexdigest()
    assert len(fp.fingerprint_bytes(b"")) == 64


def test_file_fingerprint_matches_bytes_fingerprint(tmp_path: Path) -> None:
    data = bytes(range(256)) * 1000
    path = tmp_path / "blob.bin"
    path.write_bytes(data)

    # Small chunks force many reads across the file.
    fp = ContentFingerprinter(chunk_size=7)

    assert fp.fingerprint_file(path) == fp.fingerprint_bytes(data)
    assert fp.fingerprint_file(str(path)) == hashlib.sha256(data).hexdigest()


def test_identical_content_shares_fingerprint_regardless_of_name(tmp_path: Path) -> None:
    a = tmp_path / "a.txt"
    b = tmp_path / "b.txt"
    a.write_bytes(b"same")
    b.write_bytes(b"same")

    fp = ContentFingerprinter()
    assert fp.fingerprint_file(a) == fp.fingerprint_file(b)


def test_different_content_changes_fingerprint(tmp_path: Path) -> None:
    path = tmp_path / "notes.txt"
    fp = ContentFingerprinter()

    path.write_bytes(b"A")
    first = fp.fingerprint_file(path)
    path.write_bytes(b"B")
    second = fp.fingerprint_file(path)

    assert first != second


def test_missing_file_propagates_os_error(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        ContentFingerprinter().fingerprint_file(tmp_path / "nope.txt")


def test_alternate_algorithm() -> None:
    fp = ContentFingerprinter(algorithm="sha512")
    assert fp.fingerprint_bytes(b"x") == hashlib.sha512(b"x").hexdigest()


def test_invalid_construction_rejected() -> None:
    with pytest.raises(ValueError):
        ContentFingerprinter(chunk_size=0)
    with pytest.raises(ValueError):
        ContentFingerprinter(algorithm="not-a-digest")


@pytest.mark.parametrize("algorithm", ["md5", "sha1", "shake_128", "MD5"])
def test_weak_or_variable_length_digests_rejected(algorithm: str) -> None:
    with pytest.raises(ValueError, match="Unsupported fingerprint algorithm"):
        ContentFingerprinter(algorithm=algorithm)


@pytest.mark.parametrize(
    "spelling, algorithm",
    [("SHA-256", "sha256"), (" sha512 ", "sha512"), ("sha3-256", "sha3_256"), ("BLAKE2b", "blake2b")],
)
def test_algorithm_spellings_normalize(spelling: str, algorithm: str) -> None:
    assert ContentFingerprinter(algorithm=spelling).algorithm == algorithm
    assert normalize_algorithm(spelling) == algorithm


def test_from_settings(workdir: Path) -> None:
    settings = BackupSettings(FINGERPRINT_ALGORITHM="sha3_256", FINGERPRINT_CHUNK_SIZE=1024)
    fp = ContentFingerprinter.from_settings(settings)
    assert fp.algorithm == "sha3_256"
    assert fp.chunk_size == 1024
