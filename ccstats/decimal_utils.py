from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, getcontext
from typing import Any


# ============================================================================
# PRECISION CONSTANTS
# ============================================================================

# Statement currency precision (cents)
USD_PRECISION = Decimal('0.01')


# ============================================================================
# STATEMENT ROUNDING (ROUND_HALF_UP)
# ============================================================================

def set_statement_rounding_context() -> None:
    """
    Set global Decimal context for statement calculations.
    Uses ROUND_HALF_UP (0.5 always rounds up), the way banks round cents.
    Call this once at application startup.
    """
    ctx = getcontext()
    ctx.rounding = ROUND_HALF_UP
    ctx.prec = 28  # Support up to 28 significant digits


# Initialize statement rounding on module load
set_statement_rounding_context()


# ============================================================================
# DECIMAL COERCION HELPERS
# ============================================================================

def to_decimal(value: Any, default: Decimal = Decimal(0)) -> Decimal:
    """
    Safely coerce any value to a Decimal, preserving precision for statement amounts.

    Args:
        value: Any value to convert. Supports int, float, str, Decimal, bool, None.
        default: Decimal fallback if conversion fails. Defaults to Decimal(0).

    Returns:
        Decimal: Precise numeric value, or default if conversion fails.

    Examples:
        >>> to_decimal('45.10')
        Decimal('45.10')
        >>> to_decimal(1.5) == Decimal('1.5')
        True
        >>> to_decimal('invalid') == Decimal(0)
        True

    Note:
        - Floats are coerced via str() to preserve precision
        - Existing Decimals are passed through unchanged
        - None and invalid strings return default (no exception)
    """
    try:
        if isinstance(value, Decimal):
            return value
        return Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return default


def parse_amount(text: str) -> Decimal:
    """
    Parse a printed currency amount ('$1,234.56', '-5.00') into a Decimal.

    Unlike to_decimal() this never falls back to a default: amounts read from
    a statement or a decrypted store must be exact or the read fails.

    Raises:
        ValueError: text is not a finite number
    """
    cleaned = str(text).strip().replace('$', '').replace(',', '')
    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {text!r}") from None
    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {text!r}")
    return amount


def round_usd(value: Any) -> Decimal:
    """Round to cents with ROUND_HALF_UP."""
    return to_decimal(value).quantize(USD_PRECISION, rounding=ROUND_HALF_UP)
