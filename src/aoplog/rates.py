"""Interest calculation used to exercise the interception pipeline."""

import abc
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Union

from .exceptions import BindingError

Number = Union[Decimal, int, float, str]

_CENTS = Decimal("0.01")


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def format_amount(value: Decimal) -> str:
    """Format *value* with at most two decimals.

    Rounds half away from zero and drops trailing zeros, a leading
    integer zero and a dangling point: ``73666.666`` gives ``"73666.67"``,
    ``0.5`` gives ``".5"`` and ``12.00`` gives ``"12"``.
    """
    rounded = value.quantize(_CENTS, rounding=ROUND_HALF_UP)
    if rounded == 0:
        return ""
    sign = "-" if rounded < 0 else ""
    text = f"{abs(rounded):f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text.startswith("0."):
        text = text[1:]
    return sign + text


class RateCalculatorInterface(abc.ABC):
    @abc.abstractmethod
    def calculate(self, notional: Number, rate: Number, spread: Number, days: int) -> str:
        """Return the interest for *days* on *notional* at ``rate + spread`` percent.

        Uses an actual/360 day count. Returns ``"Zero"`` when the interest
        is exactly zero.

        Raises:
            ValueError: If *days* is zero.
        """


class RateCalculator(RateCalculatorInterface):
    """Plain implementation with no logging of its own besides input warnings.

    Args:
        logger: Receives the zero-rate warning.

    Raises:
        BindingError: If *logger* is ``None``.
    """

    def __init__(self, logger: logging.Logger):
        if logger is None:
            raise BindingError("RateCalculator requires a logger")
        self._logger = logger

    def calculate(self, notional: Number, rate: Number, spread: Number, days: int) -> str:
        notional_d = _to_decimal(notional)
        rate_d = _to_decimal(rate)
        spread_d = _to_decimal(spread)

        if rate_d == 0:
            self._logger.warning("Rate is Zero")

        if days == 0:
            raise ValueError("Days can't be Zero")

        interest = notional_d * (rate_d + spread_d) / 100 * _to_decimal(days) / 360

        return "Zero" if interest == 0 else format_amount(interest)
