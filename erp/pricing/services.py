"""
Price snapshots.

A snapshot takes local amounts, converts them with the company's stable and
reference exchange rates and becomes the current price for its (variant,
type of price) pair. The variant row is locked while the current flag moves.
"""
import logging

from django.db import transaction
from django.utils import timezone

from erp.catalog.models import InventoryVariant
from erp.core.decimal_utils import ZERO, check_digits, round_amount, to_decimal
from erp.core.exceptions import ConflictError, NotFoundError, ValidationError
from erp.currencies.models import EXCHANGE_TYPE_LOCAL, EXCHANGE_TYPE_REF, EXCHANGE_TYPE_STABLE, CurrencyExchange
from erp.currencies.services import convert, get_company_rate
from .models import InventoryPriceHistory, TypeOfPrice

logger = logging.getLogger(__name__)

PRICE_COMPONENTS = ('price', 'price_base', 'tax_amount', 'cost', 'cost_avg', 'profit')


# Types of prices

def _check_typeprice_name(company_id, name, exclude_id=None):
    queryset = TypeOfPrice.objects.filter(company_id=company_id, typeprice_name__iexact=name)
    if exclude_id:
        queryset = queryset.exclude(pk=exclude_id)
    if queryset.exists():
        raise ConflictError(f'Type of price {name} already exists in this company')


def get_type_of_price(company_id, typeprice_id):
    typeprice = TypeOfPrice.objects.filter(pk=typeprice_id, company_id=company_id).first()
    if typeprice is None:
        raise NotFoundError('Type of price not found')
    return typeprice


def create_type_of_price(company_id, data):
    _check_typeprice_name(company_id, data['typeprice_name'])
    return TypeOfPrice.objects.create(company_id=company_id, **data)


def update_type_of_price(typeprice, data):
    if 'typeprice_name' in data:
        _check_typeprice_name(typeprice.company_id, data['typeprice_name'], exclude_id=typeprice.pk)
    for field, value in data.items():
        setattr(typeprice, field, value)
    typeprice.save()
    return typeprice


# Snapshots

def _non_negative(value, field_name):
    value = check_digits(to_decimal(value, field_name), field_name)
    value = check_digits(round_amount(value), field_name)
    if value < ZERO:
        raise ValidationError(errors=[{'path': field_name, 'msg': f'{field_name} cannot be negative'}])
    return value


def _optional_rate(company_id, exchange_type):
    """The active rate for a type, or None when the company does not price in it."""
    if not CurrencyExchange.objects.filter(company_id=company_id, currency_exc_type=exchange_type,
                                           currency_exc_status=1).exists():
        return None
    return get_company_rate(company_id, exchange_type)


def _lock_variant(variant_id, company_id=None):
    queryset = InventoryVariant.objects.select_for_update(of=('self',)).select_related('inventory').filter(pk=variant_id)
    if company_id is not None:
        queryset = queryset.filter(inventory__company_id=company_id)
    variant = queryset.first()
    if variant is None:
        raise NotFoundError('Inventory variant not found')
    return variant


def _local_amounts(price_base_local, tax_amount_local, cost_local, cost_avg_local):
    base = _non_negative(price_base_local, 'price_base_local')
    tax = _non_negative(tax_amount_local, 'tax_amount_local')
    cost = _non_negative(cost_local, 'cost_local')
    cost_avg = _non_negative(cost_avg_local, 'cost_avg_local') if cost_avg_local is not None else cost
    return {
        'price': check_digits(round_amount(base + tax), 'price_local'),
        'price_base': base,
        'tax_amount': tax,
        'cost': cost,
        'cost_avg': cost_avg,
        'profit': round_amount(base - cost),
    }


@transaction.atomic
def snapshot_price(variant_id, typeprice_id, price_base_local, tax_amount_local, cost_local, user,
                   cost_avg_local=None, valid_from=None, company_id=None):
    """
    Insert a price snapshot and make it the current one for its variant and type.

    The local rate must be configured. Stable and reference columns stay
    empty when the company has no rate of that type.
    """
    variant = _lock_variant(variant_id, company_id)
    item_company_id = variant.inventory.company_id
    typeprice = TypeOfPrice.objects.filter(pk=typeprice_id, company_id=item_company_id).first()
    if typeprice is None:
        raise NotFoundError('Type of price not found')
    if typeprice.typeprice_status != 1:
        raise ValidationError(errors=[{'path': 'typeprice_id', 'msg': 'Type of price is inactive'}])

    local = _local_amounts(price_base_local, tax_amount_local, cost_local, cost_avg_local)
    local_rate = get_company_rate(item_company_id, EXCHANGE_TYPE_LOCAL)
    rates = {
        'stable': _optional_rate(item_company_id, EXCHANGE_TYPE_STABLE),
        'ref': _optional_rate(item_company_id, EXCHANGE_TYPE_REF),
    }

    fields = {'currency_local_id': local_rate.currency_id}
    for component, amount in local.items():
        fields[f'{component}_local'] = amount
    for suffix, rate in rates.items():
        fields[f'currency_{suffix}_id'] = rate.currency_id if rate else None
        for component, amount in local.items():
            field_name = f'{component}_{suffix}'
            fields[field_name] = (
                convert(amount, rate.currency_exc_rate, rate.exchange_method, field_name) if rate else None
            )

    InventoryPriceHistory.objects.filter(variant=variant, typeprice=typeprice, is_current=True).update(
        is_current=False
    )
    snapshot = InventoryPriceHistory.objects.create(
        variant=variant,
        typeprice=typeprice,
        is_current=True,
        valid_from=valid_from or timezone.now(),
        user=user if user is not None and user.is_authenticated else None,
        **fields,
    )
    logger.info(f"Price snapshot {snapshot.pk} for variant {variant.pk} type {typeprice.pk}: "
                f"{snapshot.price_local} local")
    return snapshot


@transaction.atomic
def set_current(price_history_id, company_id=None):
    """Make an older snapshot the current one for its variant and type."""
    queryset = InventoryPriceHistory.objects.filter(pk=price_history_id)
    if company_id is not None:
        queryset = queryset.filter(typeprice__company_id=company_id)
    snapshot = queryset.first()
    if snapshot is None:
        raise NotFoundError('Inventory price not found')

    _lock_variant(snapshot.variant_id)
    if not snapshot.is_current:
        InventoryPriceHistory.objects.filter(
            variant_id=snapshot.variant_id, typeprice_id=snapshot.typeprice_id, is_current=True
        ).update(is_current=False)
        InventoryPriceHistory.objects.filter(pk=snapshot.pk).update(is_current=True)
        logger.info(f"Price snapshot {snapshot.pk} set as current for variant {snapshot.variant_id}")
    snapshot.refresh_from_db()
    return snapshot


# Queries

def get_price(company_id, price_history_id):
    snapshot = InventoryPriceHistory.objects.filter(pk=price_history_id, typeprice__company_id=company_id).first()
    if snapshot is None:
        raise NotFoundError('Inventory price not found')
    return snapshot


def get_price_history(variant_id, typeprice_id=None):
    queryset = InventoryPriceHistory.objects.filter(variant_id=variant_id)
    if typeprice_id is not None:
        queryset = queryset.filter(typeprice_id=typeprice_id)
    return queryset.order_by('-created_at', '-id')


def get_current_prices(variant_id):
    return (
        InventoryPriceHistory.objects.select_related('typeprice')
        .filter(variant_id=variant_id, is_current=True)
        .order_by('typeprice_id')
    )
