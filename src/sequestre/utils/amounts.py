"""
Amount encoding helpers.

Amounts travel as little-endian unsigned 64-bit integers, both in
instruction data and in the escrow state account.
"""

from decimal import Decimal

from borsh_construct import U64

from sequestre.domain.exceptions import EncodingError

U64_SIZE = 8
U64_MAX = 2**64 - 1


def check_u64(amount: int) -> int:
    """
    Ensure amount is representable as u64.

    Args:
        amount: Amount in base units

    Returns:
        The amount unchanged

    Raises:
        EncodingError: If amount is not an int in [0, 2^64)
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise EncodingError(
            f"Amount must be an integer, got {type(amount).__name__}",
            details={"amount": repr(amount)},
        )

    if amount < 0 or amount > U64_MAX:
        raise EncodingError(
            f"Amount out of u64 range: {amount}",
            details={"amount": amount},
        )

    return amount


def encode_u64_le(amount: int) -> bytes:
    """
    Encode amount as 8 little-endian bytes.

    Examples:
        >>> encode_u64_le(1)
        b'\\x01\\x00\\x00\\x00\\x00\\x00\\x00\\x00'
    """
    return U64.build(check_u64(amount))


def decode_u64_le(data: bytes) -> int:
    """
    Decode 8 little-endian bytes into an int.

    Raises:
        EncodingError: If data is not exactly 8 bytes
    """
    if len(data) != U64_SIZE:
        raise EncodingError(
            f"u64 needs {U64_SIZE} bytes, got {len(data)}",
            details={"length": len(data)},
        )
    return U64.parse(bytes(data))


def to_base_units(ui_amount: int, decimals: int) -> int:
    """
    Convert a whole-token amount to base units.

    Examples:
        >>> to_base_units(5, 6)
        5000000
    """
    return check_u64(ui_amount * 10**decimals)


def to_ui_amount(base_units: int, decimals: int) -> Decimal:
    """
    Convert base units to a token amount for display.

    Examples:
        >>> to_ui_amount(10_000_000, 6)
        Decimal('10')
    """
    return Decimal(base_units) / (Decimal(10) ** decimals)
