"""
Lot data checks. Pure functions: no database access, no exceptions.
"""
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

LOT_NUMBER_MAX_LENGTH = 100
LOT_ORIGIN_MAX_LENGTH = 100


def _as_date(value):
    if value in (None, ''):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def _as_decimal(value):
    if value in (None, ''):
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


def validate_lot_data(data):
    """
    Check lot fields and collect every problem found.

    Returns:
        dict with validation results:
        {
            'is_valid': bool,
            'errors': list of {'path', 'msg'} entries
        }
    """
    errors = []

    lot_number = data.get('lot_number')
    if lot_number is None or not str(lot_number).strip():
        errors.append({'path': 'lot_number', 'msg': 'Lot number is required'})
    elif len(str(lot_number)) > LOT_NUMBER_MAX_LENGTH:
        errors.append({'path': 'lot_number', 'msg': f'Lot number cannot exceed {LOT_NUMBER_MAX_LENGTH} characters'})

    lot_origin = data.get('lot_origin')
    if lot_origin and len(str(lot_origin)) > LOT_ORIGIN_MAX_LENGTH:
        errors.append({'path': 'lot_origin', 'msg': f'Lot origin cannot exceed {LOT_ORIGIN_MAX_LENGTH} characters'})

    for field, label in (('lot_unit_cost', 'Lot unit cost'), ('lot_unit_cost_ref', 'Lot unit cost reference')):
        raw = data.get(field)
        if raw in (None, ''):
            continue
        cost = _as_decimal(raw)
        if cost is None or not cost.is_finite():
            errors.append({'path': field, 'msg': f'{label} must be a number'})
        elif cost < 0:
            errors.append({'path': field, 'msg': f'{label} cannot be negative'})

    for field in ('expiration_date', 'manufacture_date'):
        raw = data.get(field)
        if raw not in (None, '') and _as_date(raw) is None:
            errors.append({'path': field, 'msg': f'{field} must be a valid date'})

    expiration = _as_date(data.get('expiration_date'))
    manufacture = _as_date(data.get('manufacture_date'))
    if expiration and manufacture and expiration <= manufacture:
        errors.append({'path': 'expiration_date', 'msg': 'Expiration date must be after manufacture date'})

    return {
        'is_valid': len(errors) == 0,
        'errors': errors,
    }
