"""Currency unit conversion between decimal ether and integer wei."""

from decimal import Decimal, InvalidOperation
from typing import Union

WEI_PER_ETH = 10**18


def eth(value: Union[int, str, Decimal]) -> int:
    """
    Convert an ether amount to wei.

    Floats are rejected; pass a string such as "8.2" instead so that no
    binary rounding sneaks into the result.
    """
    if isinstance(value, float):
        raise TypeError("Pass ether amounts as str, int or Decimal, not float")
    try:
        wei = Decimal(value) * WEI_PER_ETH
    except InvalidOperation as err:
        raise ValueError(f"Not a number: {value!r}") from err
    if wei != wei.to_integral_value():
        raise ValueError(f"{value} ETH has more than 18 decimals")
    return int(wei)


def wei_to_eth(wei: int) -> Decimal:
    """Convert wei to ether, normalized (8.2, not 8.200000000000000000)."""
    value = (Decimal(wei) / WEI_PER_ETH).normalize()
    if value.as_tuple().exponent > 0:
        value = value.quantize(Decimal(1))
    return value
