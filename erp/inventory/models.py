import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models

from erp.catalog.models import InventoryVariant
from erp.companies.models import STATUS_CHOICES, Company, Sucursal
from erp.core.models import AppendOnlyModel
from erp.currencies.models import Currency

MOVEMENT_IN = 1
MOVEMENT_OUT = 2
MOVEMENT_TRANSFER = 3
MOVEMENT_TYPE_CHOICES = [
    (MOVEMENT_IN, 'In'),
    (MOVEMENT_OUT, 'Out'),
    (MOVEMENT_TRANSFER, 'Transfer'),
]

TRANSFER_SOURCE = 'source'
TRANSFER_DESTINATION = 'destination'
TRANSFER_ROLE_CHOICES = [
    (TRANSFER_SOURCE, 'Source'),
    (TRANSFER_DESTINATION, 'Destination'),
]

ZERO_QTY = Decimal('0.000')


class InventoryStorage(models.Model):
    """Physical or logical place where stock is kept"""
    company = models.ForeignKey(Company, on_delete=models.PROTECT, related_name='storages')
    sucursal = models.ForeignKey(Sucursal, on_delete=models.PROTECT, null=True, blank=True, related_name='storages')
    inv_storage_code = models.CharField(max_length=20)
    inv_storage_name = models.CharField(max_length=100)
    inv_storage_description = models.TextField(blank=True, default='')
    inv_storage_status = models.PositiveSmallIntegerField(choices=STATUS_CHOICES, default=1)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.inv_storage_code} - {self.inv_storage_name}"

    class Meta:
        db_table = 'inventory_storages'
        unique_together = [['company', 'inv_storage_code']]


class InventoryLot(models.Model):
    """Batch of a variant with its own cost and expiration"""
    company = models.ForeignKey(Company, on_delete=models.PROTECT, related_name='inventory_lots')
    variant = models.ForeignKey(InventoryVariant, on_delete=models.PROTECT, related_name='lots')
    lot_number = models.CharField(max_length=100)
    lot_origin = models.CharField(max_length=100, blank=True, default='')
    lot_status = models.PositiveSmallIntegerField(choices=STATUS_CHOICES, default=1)
    expiration_date = models.DateField(null=True, blank=True)
    manufacture_date = models.DateField(null=True, blank=True)
    lot_notes = models.TextField(blank=True, default='')
    lot_unit_cost = models.DecimalField(max_digits=18, decimal_places=3, null=True, blank=True)
    lot_unit_currency = models.ForeignKey(Currency, on_delete=models.PROTECT, null=True, blank=True,
                                          related_name='lots')
    lot_unit_cost_ref = models.DecimalField(max_digits=18, decimal_places=3, null=True, blank=True)
    lot_unit_currency_ref = models.ForeignKey(Currency, on_delete=models.PROTECT, null=True, blank=True,
                                              related_name='lots_ref')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.lot_number

    class Meta:
        db_table = 'inventory_lots'
        unique_together = [['company', 'lot_number']]
        indexes = [
            models.Index(fields=['variant', 'lot_status'], name='inv_lot_variant_status_idx'),
            models.Index(fields=['expiration_date'], name='inv_lot_expiration_idx'),
        ]


class InventoryVariantStorage(models.Model):
    """Current balance of a variant in a storage. Written only by the stock ledger."""
    variant = models.ForeignKey(InventoryVariant, on_delete=models.PROTECT, related_name='storage_balances')
    storage = models.ForeignKey(InventoryStorage, on_delete=models.PROTECT, related_name='variant_balances')
    inv_vs_stock = models.DecimalField(max_digits=10, decimal_places=3, default=ZERO_QTY)
    inv_vs_stock_reserved = models.DecimalField(max_digits=10, decimal_places=3, default=ZERO_QTY)
    inv_vs_stock_committed = models.DecimalField(max_digits=10, decimal_places=3, default=ZERO_QTY)
    inv_vs_stock_prev = models.DecimalField(max_digits=10, decimal_places=3, default=ZERO_QTY)
    inv_vs_stock_min = models.DecimalField(max_digits=10, decimal_places=3, default=ZERO_QTY)
    last_user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                  related_name='+')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'inventory_variants_storages'
        unique_together = [['variant', 'storage']]


class InventoryLotStorage(models.Model):
    """Current balance of a lot in a storage. Written only by the stock ledger."""
    lot = models.ForeignKey(InventoryLot, on_delete=models.PROTECT, related_name='storage_balances')
    storage = models.ForeignKey(InventoryStorage, on_delete=models.PROTECT, related_name='lot_balances')
    variant = models.ForeignKey(InventoryVariant, on_delete=models.PROTECT, related_name='lot_storage_balances')
    inv_ls_stock = models.DecimalField(max_digits=10, decimal_places=3, default=ZERO_QTY)
    inv_ls_stock_reserved = models.DecimalField(max_digits=10, decimal_places=3, default=ZERO_QTY)
    inv_ls_stock_committed = models.DecimalField(max_digits=10, decimal_places=3, default=ZERO_QTY)
    inv_ls_stock_prev = models.DecimalField(max_digits=10, decimal_places=3, default=ZERO_QTY)
    inv_ls_stock_min = models.DecimalField(max_digits=10, decimal_places=3, default=ZERO_QTY)
    last_user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                  related_name='+')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'inventory_lots_storages'
        unique_together = [['lot', 'storage']]


class InventoryMovement(AppendOnlyModel):
    """
    Ledger entry. Transfers are two rows sharing ``correlation_id``, one per
    ``transfer_role``. Corrections are new rows pointing at the original
    through ``reverses``.
    """
    storage = models.ForeignKey(InventoryStorage, on_delete=models.PROTECT, related_name='movements')
    variant = models.ForeignKey(InventoryVariant, on_delete=models.PROTECT, related_name='movements')
    lot = models.ForeignKey(InventoryLot, on_delete=models.PROTECT, null=True, blank=True, related_name='movements')
    movement_type = models.PositiveSmallIntegerField(choices=MOVEMENT_TYPE_CHOICES)
    quantity = models.DecimalField(max_digits=10, decimal_places=3)
    movement_reason = models.CharField(max_length=255, blank=True, default='')
    related_doc = models.CharField(max_length=100, blank=True, default='')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                             related_name='inventory_movements')
    correlation_id = models.UUIDField(default=uuid.uuid4, db_index=True)
    transfer_role = models.CharField(max_length=12, choices=TRANSFER_ROLE_CHOICES, null=True, blank=True)
    reverses = models.OneToOneField('self', on_delete=models.PROTECT, null=True, blank=True,
                                    related_name='reversal')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.get_movement_type_display()} {self.quantity} of {self.variant_id} @ {self.storage_id}"

    class Meta:
        db_table = 'inventory_movements'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['variant', 'storage', '-created_at'], name='inv_move_variant_storage_idx'),
            models.Index(fields=['storage', '-created_at'], name='inv_move_storage_idx'),
            models.Index(fields=['related_doc'], name='inv_move_related_doc_idx'),
            models.Index(fields=['movement_type', '-created_at'], name='inv_move_type_idx'),
        ]
