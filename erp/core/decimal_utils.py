"""
Fixed-point helpers. Amounts and quantities carry 3 decimal places,
exchange rates carry 8. Floats never enter the arithmetic.
"""
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .exceptions import ValidationError

AMOUNT_MAX_DIGITS = 18
AMOUNT_DECIMAL_PLACES = 3
QUANTITY_MAX_DIGITS = 10
QUANTITY_DECIMAL_PLACES = 3
RATE_DECIMAL_PLACES = 8
ROUNDING = ROUND_HALF_UP

AMOUNT_QUANTIZER = Decimal('0.001')
QUANTITY_QUANTIZER = Decimal('0.001')
RATE_QUANTIZER = Decimal('0.00000001')

ZERO = Decimal('0')


def to_decimal(value, field_name='value'):
    """Parse ``value`` as Decimal. Floats go through ``str`` to keep their printed digits."""
    if isinstance(value, Decimal):
        result = value
    else:
        if isinstance(value, float):
            value = repr(value)
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError(errors=[{'path': field_name, 'msg': f'{field_name} must be a decimal number'}])
    if not result.is_finite():
        raise ValidationError(errors=[{'path': field_name, 'msg': f'{field_name} must be a finite number'}])
    return result


def round_amount(value):
    return to_decimal(value).quantize(AMOUNT_QUANTIZER, rounding=ROUNDING)


def round_rate(value):
    return to_decimal(value).quantize(RATE_QUANTIZER, rounding=ROUNDING)


def check_digits(value, field_name, max_digits=AMOUNT_MAX_DIGITS, decimal_places=AMOUNT_DECIMAL_PLACES):
    """Reject ``value`` when its integer part does not fit a DECIMAL(max_digits, decimal_places) column."""
    integer_digits = max_digits - decimal_places
    if value is not None and abs(value) >= Decimal(10) ** integer_digits:
        raise ValidationError(errors=[{
            'path': field_name,
            'msg': f'{field_name} exceeds the maximum of {integer_digits} integer digits',
        }])
    return value
