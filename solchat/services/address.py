"""Solana address helpers (base58, 32-byte public keys)."""

from __future__ import annotations

from ..core.errors import ValidationError

_BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_BASE58_INDEX = {char: index for index, char in enumerate(_BASE58_ALPHABET)}

PUBLIC_KEY_LENGTH = 32


def base58_decode(value: str) -> bytes:
    if not value:
        return b""
    num = 0
    for char in value:
        if char not in _BASE58_INDEX:
            raise ValueError("Invalid base58 character")
        num = num * 58 + _BASE58_INDEX[char]
    combined = num.to_bytes((num.bit_length() + 7) // 8, "big") if num else b""
    pad = len(value) - len(value.lstrip("1"))
    return b"\x00" * pad + combined


def base58_encode(data: bytes) -> str:
    if not data:
        return ""
    num = int.from_bytes(data, "big")
    encoded = ""
    while num > 0:
        num, rem = divmod(num, 58)
        encoded = _BASE58_ALPHABET[rem] + encoded
    pad = 0
    for byte in data:
        if byte == 0:
            pad += 1
        else:
            break
    return "1" * pad + encoded


def is_valid_solana_address(value: object) -> bool:
    """True when ``value`` decodes to a 32-byte ed25519 public key."""
    if not isinstance(value, str):
        return False
    candidate = value.strip()
    if not 32 <= len(candidate) <= 44:
        return False
    try:
        return len(base58_decode(candidate)) == PUBLIC_KEY_LENGTH
    except ValueError:
        return False


def require_solana_address(value: object, field: str = "address") -> str:
    if not is_valid_solana_address(value):
        raise ValidationError(f"Invalid Solana {field}: {value}")
    return str(value).strip()


def shorten(value: str, head: int = 6, tail: int = 6) -> str:
    """``abcdef...uvwxyz`` style abbreviation for signatures and addresses."""
    if len(value) <= head + tail + 3:
        return value
    return f"{value[:head]}...{value[-tail:]}"
