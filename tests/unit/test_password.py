"""Unit tests for password hashing utilities."""

from src.ft_auth.auth.password import hash_password, verify_password


def test_hash_is_not_plaintext() -> None:
    hashed = hash_password("Secret123")
    assert hashed != "Secret123"
    assert hashed.startswith("$2b$")


def test_verify_correct_password() -> None:
    hashed = hash_password("Secret123")
    assert verify_password("Secret123", hashed) is True


def test_verify_wrong_password() -> None:
    hashed = hash_password("Secret123")
    assert verify_password("secret123", hashed) is False


def test_same_password_different_salts() -> None:
    assert hash_password("Secret123") != hash_password("Secret123")


def test_max_length_password_round_trips() -> None:
    long_pw = "x" * 72
    assert verify_password(long_pw, hash_password(long_pw)) is True
