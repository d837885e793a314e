from decimal import Decimal

from django.conf import settings
from django.db import models

from erp.companies.models import STATUS_CHOICES, Company
from erp.core.models import AppendOnlyModel

EXCHANGE_TYPE_LOCAL = 1
EXCHANGE_TYPE_STABLE = 2
EXCHANGE_TYPE_REF = 3
EXCHANGE_TYPE_CHOICES = [
    (EXCHANGE_TYPE_LOCAL, 'Local'),
    (EXCHANGE_TYPE_STABLE, 'Stable'),
    (EXCHANGE_TYPE_REF, 'Reference'),
]

METHOD_DIVIDE = 'DIVIDE'
METHOD_MULTIPLY = 'MULTIPLY'
EXCHANGE_METHOD_CHOICES = [
    (METHOD_DIVIDE, 'Divide'),
    (METHOD_MULTIPLY, 'Multiply'),
]


class Currency(models.Model):
    """Shared currency reference data ("coins")"""
    currency_iso_code = models.CharField(max_length=5, unique=True)
    currency_name = models.CharField(max_length=40)
    currency_symbol = models.CharField(max_length=10, blank=True, default='')
    currency_status = models.PositiveSmallIntegerField(choices=STATUS_CHOICES, default=1)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.currency_iso_code

    class Meta:
        db_table = 'currencies'
        verbose_name_plural = 'currencies'


class CompanyCurrency(models.Model):
    """Currencies a company is allowed to operate with"""
    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name='company_currencies')
    currency = models.ForeignKey(Currency, on_delete=models.PROTECT, related_name='company_currencies')
    conversion_factor = models.DecimalField(max_digits=18, decimal_places=8, default=Decimal('1'))
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'companies_currencies'
        unique_together = [['company', 'currency']]


class CurrencyExchange(models.Model):
    """Live exchange rate of a currency for one of the company's three pricing views"""
    company = models.ForeignKey(Company, on_delete=models.PROTECT, related_name='currency_exchanges')
    currency = models.ForeignKey(Currency, on_delete=models.PROTECT, related_name='exchanges')
    currency_exc_type = models.PositiveSmallIntegerField(choices=EXCHANGE_TYPE_CHOICES)
    currency_exc_rate = models.DecimalField(max_digits=18, decimal_places=8)
    exchange_method = models.CharField(max_length=10, choices=EXCHANGE_METHOD_CHOICES, default=METHOD_MULTIPLY)
    currency_exc_status = models.PositiveSmallIntegerField(choices=STATUS_CHOICES, default=1)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.currency_id} type {self.currency_exc_type} @ {self.currency_exc_rate}"

    class Meta:
        db_table = 'currencies_exchanges'
        unique_together = [['company', 'currency', 'currency_exc_type']]
        indexes = [
            models.Index(fields=['company', 'currency_exc_type', 'currency_exc_status'], name='curr_exc_company_type_idx'),
        ]


class CurrencyExchangeHistory(AppendOnlyModel):
    """Every state a CurrencyExchange row has been in"""
    exchange = models.ForeignKey(CurrencyExchange, on_delete=models.SET_NULL, null=True, blank=True,
                                 related_name='history')
    company = models.ForeignKey(Company, on_delete=models.PROTECT, related_name='currency_exchange_history')
    currency = models.ForeignKey(Currency, on_delete=models.PROTECT, related_name='exchange_history')
    currency_exc_type = models.PositiveSmallIntegerField(choices=EXCHANGE_TYPE_CHOICES)
    currency_exc_rate = models.DecimalField(max_digits=18, decimal_places=8)
    exchange_method = models.CharField(max_length=10, choices=EXCHANGE_METHOD_CHOICES)
    currency_exc_status = models.PositiveSmallIntegerField(choices=STATUS_CHOICES, default=1)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                   related_name='currency_exchange_changes')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'currencies_exchanges_history'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['company', 'currency', '-created_at'], name='curr_exc_hist_lookup_idx'),
        ]
