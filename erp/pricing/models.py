from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from erp.catalog.models import InventoryVariant
from erp.companies.models import STATUS_CHOICES, Company
from erp.currencies.models import Currency


class TypeOfPrice(models.Model):
    """Named price list of a company (retail, wholesale, ...)"""
    company = models.ForeignKey(Company, on_delete=models.PROTECT, related_name='types_of_prices')
    typeprice_name = models.CharField(max_length=100)
    typeprice_description = models.TextField(blank=True, default='')
    typeprice_status = models.PositiveSmallIntegerField(choices=STATUS_CHOICES, default=1)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.typeprice_name

    class Meta:
        db_table = 'types_of_prices'
        unique_together = [['company', 'typeprice_name']]


def _amount_field():
    return models.DecimalField(max_digits=18, decimal_places=3, null=True, blank=True)


class InventoryPriceHistory(models.Model):
    """
    Price snapshot of a variant for one type of price, expressed in the
    company's local, stable and reference currencies. Only ``is_current``
    ever changes after insert.
    """
    variant = models.ForeignKey(InventoryVariant, on_delete=models.PROTECT, related_name='price_history')
    typeprice = models.ForeignKey(TypeOfPrice, on_delete=models.PROTECT, related_name='price_history')
    is_current = models.BooleanField(default=False)

    price_local = _amount_field()
    price_stable = _amount_field()
    price_ref = _amount_field()
    price_base_local = _amount_field()
    price_base_stable = _amount_field()
    price_base_ref = _amount_field()
    tax_amount_local = _amount_field()
    tax_amount_stable = _amount_field()
    tax_amount_ref = _amount_field()
    cost_local = _amount_field()
    cost_stable = _amount_field()
    cost_ref = _amount_field()
    cost_avg_local = _amount_field()
    cost_avg_stable = _amount_field()
    cost_avg_ref = _amount_field()
    profit_local = _amount_field()
    profit_stable = _amount_field()
    profit_ref = _amount_field()

    currency_local = models.ForeignKey(Currency, on_delete=models.PROTECT, null=True, blank=True, related_name='+')
    currency_stable = models.ForeignKey(Currency, on_delete=models.PROTECT, null=True, blank=True, related_name='+')
    currency_ref = models.ForeignKey(Currency, on_delete=models.PROTECT, null=True, blank=True, related_name='+')

    valid_from = models.DateTimeField(default=timezone.now)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                             related_name='price_snapshots')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'inventory_prices_history'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['variant', 'typeprice', '-created_at'], name='inv_price_variant_type_idx'),
        ]
        constraints = [
            models.UniqueConstraint(fields=['variant', 'typeprice'], condition=Q(is_current=True),
                                    name='inv_price_single_current'),
        ]
