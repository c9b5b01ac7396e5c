"""Shared type definitions for chain-facing models.

Contract state arrives as JSON with every integer encoded as a decimal string
and every address as a ByStr20 hex string.
"""

from typing import Annotated, Any

from pydantic import BeforeValidator, Field

from ampswap.constants import UINT128_MAX

UINT256_MAX = 2**256 - 1


def parse_uint(value: Any, *, bits: int = 128) -> int:
    """Parse an unsigned contract integer into an int.

    Args:
        value: Decimal string or int
        bits: Width of the contract field (128 or 256)

    Returns:
        The value as a non-negative int

    Raises:
        ValueError: If value is not an integer in [0, 2^bits-1]
    """
    max_value = UINT128_MAX if bits == 128 else UINT256_MAX
    if isinstance(value, bool):
        raise ValueError(f"Uint{bits} must be string or int, got bool")
    if isinstance(value, str):
        try:
            value = int(value)
        except ValueError as err:
            raise ValueError(f"Uint{bits} must be a decimal integer string: '{value}'") from err
    if not isinstance(value, int):
        raise ValueError(f"Uint{bits} must be string or int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"Uint{bits} cannot be negative: {value}")
    if value > max_value:
        raise ValueError(f"Uint{bits} overflow: {value} > 2^{bits}-1")
    return value


def normalize_address(address: str, *, validate: bool = False) -> str:
    """Normalize a ByStr20 address to lowercase with 0x prefix.

    Args:
        address: Hex address with or without 0x prefix
        validate: If True, raises ValueError for malformed addresses

    Returns:
        Lowercase address with 0x prefix

    Raises:
        ValueError: If validate=True and address is not 20 hex bytes
    """
    addr = address.lower()
    if not addr.startswith("0x"):
        addr = "0x" + addr

    if validate and not is_valid_address(addr):
        raise ValueError(f"Invalid address: {address}")

    return addr


def is_valid_address(address: str) -> bool:
    """Check if a string is a 0x-prefixed 20-byte hex address."""
    if not isinstance(address, str):
        return False
    if not address.startswith("0x") or len(address) != 42:
        return False
    try:
        int(address, 16)
        return True
    except ValueError:
        return False


def _parse_uint128(value: Any) -> int:
    return parse_uint(value, bits=128)


def _parse_uint256(value: Any) -> int:
    return parse_uint(value, bits=256)


def _validated_address(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError(f"Address must be a string, got {type(value).__name__}")
    return normalize_address(value, validate=True)


# Token amount held in a Uint128 contract field
Uint128 = Annotated[
    int,
    BeforeValidator(_parse_uint128),
    Field(description="128-bit unsigned integer (decimal string on the wire)"),
]

# Wider accumulator fields (EMAs, k_last)
Uint256 = Annotated[
    int,
    BeforeValidator(_parse_uint256),
    Field(description="256-bit unsigned integer (decimal string on the wire)"),
]

# 20-byte address, normalized to lowercase
Address = Annotated[str, BeforeValidator(_validated_address)]
