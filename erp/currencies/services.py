"""
Exchange-rate lookup and conversion.

Each company prices in up to three parallel views (local, stable, reference).
A CurrencyExchange row tells how to turn a local amount into that currency:
``MULTIPLY`` means local x rate, ``DIVIDE`` means local / rate.
"""
import logging

from django.db import transaction

from erp.core.cache_utils import REFERENCE_DATA_CACHE_TTL, cached_query, invalidate_cache_pattern
from erp.core.decimal_utils import ZERO, check_digits, round_amount, to_decimal
from erp.core.exceptions import (
    ConfigurationError, ConflictError, DivisionByZeroError, NotFoundError, ValidationError,
)
from erp.core.services import replace_associations, require_existing_ids
from .models import (
    EXCHANGE_TYPE_CHOICES, METHOD_DIVIDE, METHOD_MULTIPLY,
    CompanyCurrency, Currency, CurrencyExchange, CurrencyExchangeHistory,
)

logger = logging.getLogger(__name__)

CURRENCIES_CACHE_PREFIX = 'currencies_list'
EXCHANGE_TYPES = dict(EXCHANGE_TYPE_CHOICES)
INVERSE_METHODS = {METHOD_MULTIPLY: METHOD_DIVIDE, METHOD_DIVIDE: METHOD_MULTIPLY}


# Currencies

@cached_query(cache_ttl=REFERENCE_DATA_CACHE_TTL, key_prefix=CURRENCIES_CACHE_PREFIX)
def get_currencies(status=None):
    from .serializers import CurrencySerializer

    queryset = Currency.objects.all().order_by('currency_iso_code')
    if status is not None:
        queryset = queryset.filter(currency_status=status)
    return list(CurrencySerializer(queryset, many=True).data)


def _check_currency_unique(iso_code, exclude_id=None):
    queryset = Currency.objects.filter(currency_iso_code__iexact=iso_code)
    if exclude_id:
        queryset = queryset.exclude(pk=exclude_id)
    if queryset.exists():
        raise ConflictError(f'Currency {iso_code} already exists')


def create_currency(data):
    _check_currency_unique(data['currency_iso_code'])
    currency = Currency.objects.create(**data)
    invalidate_cache_pattern(CURRENCIES_CACHE_PREFIX)
    return currency


def update_currency(currency, data):
    if 'currency_iso_code' in data:
        _check_currency_unique(data['currency_iso_code'], exclude_id=currency.pk)
    for field, value in data.items():
        setattr(currency, field, value)
    currency.save()
    invalidate_cache_pattern(CURRENCIES_CACHE_PREFIX)
    return currency


@transaction.atomic
def assign_company_currencies(company, currency_ids, remove_missing=True):
    currency_ids = require_existing_ids(Currency.objects.all(), currency_ids, 'currency_ids')
    result = replace_associations(CompanyCurrency, 'company', company, 'currency', currency_ids,
                                  remove_missing=remove_missing)
    logger.info(f"Company {company.pk} currencies updated: {result}")
    return result


# Conversion

def _apply(amount, rate, method):
    if method == METHOD_MULTIPLY:
        return amount * rate
    if method == METHOD_DIVIDE:
        if rate == ZERO:
            raise DivisionByZeroError()
        return amount / rate
    raise ValidationError(errors=[{'path': 'exchange_method', 'msg': f'Unknown exchange method: {method}'}])


def _invert(amount, rate, method):
    """Undo ``_apply``: turn an amount in the rate's currency back into local currency."""
    return _apply(amount, rate, INVERSE_METHODS.get(method, method))


def _rounded(value, field_name):
    check_digits(value, field_name)
    return check_digits(round_amount(value), field_name)


def convert(amount, rate, method, field_name='converted_amount'):
    """
    MULTIPLY returns amount x rate, DIVIDE returns amount / rate.
    The result is rounded half-up to 3 decimal places and must fit an amount column.
    """
    amount = to_decimal(amount, 'amount')
    rate = to_decimal(rate, 'rate')
    return _rounded(_apply(amount, rate, method), field_name)


# Rate lookup

def get_exchange_rate(company_id, currency_id, exchange_type):
    """The active exchange row for the (company, currency, type) triple."""
    exchange = (
        CurrencyExchange.objects.select_related('currency')
        .filter(company_id=company_id, currency_id=currency_id,
                currency_exc_type=exchange_type, currency_exc_status=1)
        .first()
    )
    if exchange is None:
        raise NotFoundError(
            f'No active {EXCHANGE_TYPES.get(exchange_type, exchange_type)} exchange rate configured '
            f'for currency {currency_id}'
        )
    return exchange


def get_company_rate(company_id, exchange_type, currency_id=None):
    """
    The company's active exchange row for a type. Without a currency the
    company must have exactly one active row of that type.
    """
    queryset = CurrencyExchange.objects.select_related('currency').filter(
        company_id=company_id, currency_exc_type=exchange_type, currency_exc_status=1
    )
    if currency_id is not None:
        queryset = queryset.filter(currency_id=currency_id)
    rows = list(queryset[:2])
    type_label = EXCHANGE_TYPES.get(exchange_type, exchange_type)
    if not rows:
        raise ConfigurationError(f'Company has no active {type_label} exchange rate configured')
    if len(rows) > 1:
        raise ConfigurationError(f'Company has more than one active {type_label} exchange rate; specify the currency')
    return rows[0]


def _get_currency_exchange(company_id, currency_id):
    exchange = (
        CurrencyExchange.objects
        .filter(company_id=company_id, currency_id=currency_id, currency_exc_status=1)
        .order_by('currency_exc_type')
        .first()
    )
    if exchange is None:
        raise NotFoundError(f'No active exchange rate configured for currency {currency_id}')
    return exchange


def convert_between(company_id, from_currency_id, to_currency_id, amount):
    """
    Convert ``amount`` between two of the company's currencies by going
    through local currency: undo the source rate, then apply the target rate.
    """
    amount = to_decimal(amount, 'amount')
    if from_currency_id == to_currency_id:
        return {
            'converted_amount': _rounded(amount, 'amount'),
            'from_currency_id': from_currency_id,
            'to_currency_id': to_currency_id,
            'from_rate': None,
            'from_method': None,
            'to_rate': None,
            'to_method': None,
        }

    source = _get_currency_exchange(company_id, from_currency_id)
    target = _get_currency_exchange(company_id, to_currency_id)

    local_amount = _invert(amount, source.currency_exc_rate, source.exchange_method)
    converted = _apply(local_amount, target.currency_exc_rate, target.exchange_method)
    return {
        'converted_amount': _rounded(converted, 'converted_amount'),
        'from_currency_id': from_currency_id,
        'to_currency_id': to_currency_id,
        'from_rate': source.currency_exc_rate,
        'from_method': source.exchange_method,
        'to_rate': target.currency_exc_rate,
        'to_method': target.exchange_method,
    }


# Exchange configuration

def _write_history(exchange, user):
    return CurrencyExchangeHistory.objects.create(
        exchange=exchange,
        company_id=exchange.company_id,
        currency_id=exchange.currency_id,
        currency_exc_type=exchange.currency_exc_type,
        currency_exc_rate=exchange.currency_exc_rate,
        exchange_method=exchange.exchange_method,
        currency_exc_status=exchange.currency_exc_status,
        created_by=user if user is not None and user.is_authenticated else None,
    )


def _check_rate(data):
    rate = data.get('currency_exc_rate')
    if rate is not None and rate < ZERO:
        raise ValidationError(errors=[{'path': 'currency_exc_rate', 'msg': 'currency_exc_rate cannot be negative'}])
    if rate is not None and rate == ZERO and data.get('exchange_method') == METHOD_DIVIDE:
        raise DivisionByZeroError()


@transaction.atomic
def create_exchange(company_id, data, user=None):
    currency_id = data['currency_id']
    if not Currency.objects.filter(pk=currency_id).exists():
        raise NotFoundError('Currency not found')
    _check_rate(data)

    if CurrencyExchange.objects.filter(
        company_id=company_id, currency_id=currency_id, currency_exc_type=data['currency_exc_type']
    ).exists():
        logger.warning(f"Duplicate exchange for company {company_id}, currency {currency_id}, "
                       f"type {data['currency_exc_type']}")
        raise ConflictError('A currency exchange already exists for this company, currency and type')

    exchange = CurrencyExchange.objects.create(company_id=company_id, **data)
    _write_history(exchange, user)
    logger.info(f"Exchange {exchange.pk} created for company {company_id}: "
                f"{exchange.currency_exc_rate} {exchange.exchange_method}")
    return exchange


@transaction.atomic
def update_exchange(exchange_id, data, user=None, company_id=None):
    """Record the current state in history, then apply ``data``."""
    queryset = CurrencyExchange.objects.select_for_update().filter(pk=exchange_id)
    if company_id is not None:
        queryset = queryset.filter(company_id=company_id)
    exchange = queryset.first()
    if exchange is None:
        raise NotFoundError('Currency exchange not found')

    currency_id = data.get('currency_id', exchange.currency_id)
    exchange_type = data.get('currency_exc_type', exchange.currency_exc_type)
    if currency_id != exchange.currency_id and not Currency.objects.filter(pk=currency_id).exists():
        raise NotFoundError('Currency not found')
    if (currency_id, exchange_type) != (exchange.currency_id, exchange.currency_exc_type):
        if CurrencyExchange.objects.filter(
            company_id=exchange.company_id, currency_id=currency_id, currency_exc_type=exchange_type
        ).exclude(pk=exchange.pk).exists():
            raise ConflictError('A currency exchange already exists for this company, currency and type')
    _check_rate({
        'currency_exc_rate': data.get('currency_exc_rate', exchange.currency_exc_rate),
        'exchange_method': data.get('exchange_method', exchange.exchange_method),
    })

    old_rate = exchange.currency_exc_rate
    _write_history(exchange, user)
    for field, value in data.items():
        setattr(exchange, field, value)
    exchange.save()
    logger.info(f"Exchange {exchange.pk} updated: rate {old_rate} -> {exchange.currency_exc_rate}")
    return exchange


def get_exchange_history(company_id, currency_id=None):
    queryset = CurrencyExchangeHistory.objects.select_related('currency').filter(company_id=company_id)
    if currency_id is not None:
        queryset = queryset.filter(currency_id=currency_id)
    return queryset.order_by('-created_at', '-id')
