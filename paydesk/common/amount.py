"""Amount normalization for user-entered INR values.

Form input is coerced rather than rejected: anything that is not a finite
number of at least one rupee becomes one rupee, and anything above
`MAX_MAJOR_UNITS` is capped there. `strict=True` turns the
coercion into an `AmountRejected` error for callers that prefer to refuse.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

MIN_MAJOR_UNITS = 1
MAX_MAJOR_UNITS = 5_000_000
MINOR_UNITS_PER_MAJOR = 100
MIN_AMOUNT = MIN_MAJOR_UNITS * MINOR_UNITS_PER_MAJOR
MAX_AMOUNT = MAX_MAJOR_UNITS * MINOR_UNITS_PER_MAJOR


class AmountRejected(ValueError):
    """Raised by strict normalization instead of coercing to the minimum."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


def _parse(raw) -> Decimal | None:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, Decimal):
        value = raw
    elif isinstance(raw, (int, float)):
        value = Decimal(str(raw))
    elif isinstance(raw, str):
        try:
            value = Decimal(raw.strip())
        except InvalidOperation:
            return None
    else:
        return None
    if not value.is_finite():
        return None
    return value


def normalize(raw, strict: bool = False) -> int:
    """Return the paise amount for `raw`, between `MIN_AMOUNT` and `MAX_AMOUNT`."""

    value = _parse(raw)
    if value is None:
        if strict:
            raise AmountRejected(f"not a number: {raw!r}")
        return MIN_AMOUNT
    if value > MAX_MAJOR_UNITS:
        if strict:
            raise AmountRejected(f"above maximum of {MAX_MAJOR_UNITS}: {raw!r}")
        return MAX_AMOUNT
    if value < MIN_MAJOR_UNITS:
        if strict:
            raise AmountRejected(f"below minimum of {MIN_MAJOR_UNITS}: {raw!r}")
        return MIN_AMOUNT
    major = int(value.to_integral_value(rounding=ROUND_HALF_UP))
    return major * MINOR_UNITS_PER_MAJOR


def to_major_units(amount: int) -> int:
    """Convert a normalized paise amount back to whole rupees."""

    return amount // MINOR_UNITS_PER_MAJOR
