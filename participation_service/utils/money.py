from decimal import Decimal, InvalidOperation

CENT = Decimal("0.01")


def to_decimal(value):
    """
    Convert JSON input to Decimal without passing through binary floats.
    Raises ValueError for booleans, non-numeric or non-finite input.
    """
    if value is None or isinstance(value, bool):
        raise ValueError("not a number")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValueError(f"not a number: {value!r}")
    if not amount.is_finite():
        raise ValueError(f"not a finite number: {value!r}")
    return amount


def has_cents_precision(amount):
    try:
        return amount == amount.quantize(CENT)
    except InvalidOperation:
        return False


def money(amount):
    """Render a Decimal as a two-place string for JSON responses."""
    if amount is None:
        return None
    return str(Decimal(amount).quantize(CENT))
