from decimal import Decimal

from django.db import models

from erp.companies.models import STATUS_CHOICES, Company, Sucursal
from erp.currencies.models import Currency


class Tax(models.Model):
    """Tax configuration of a company"""
    TAX_TYPE_EXEMPT = 1
    TAX_TYPE_PERCENTAGE = 2
    TAX_TYPE_FIXED = 3
    TAX_TYPE_CHOICES = [
        (TAX_TYPE_EXEMPT, 'Exempt'),
        (TAX_TYPE_PERCENTAGE, 'Percentage'),
        (TAX_TYPE_FIXED, 'Fixed amount'),
    ]

    company = models.ForeignKey(Company, on_delete=models.PROTECT, related_name='taxes')
    tax_code = models.CharField(max_length=20)
    tax_name = models.CharField(max_length=100)
    tax_description = models.TextField(blank=True, default='')
    tax_status = models.PositiveSmallIntegerField(choices=STATUS_CHOICES, default=1)
    tax_type = models.PositiveSmallIntegerField(choices=TAX_TYPE_CHOICES, default=TAX_TYPE_PERCENTAGE)
    tax_value = models.DecimalField(max_digits=18, decimal_places=3, default=Decimal('0'))
    currency = models.ForeignKey(Currency, on_delete=models.PROTECT, null=True, blank=True, related_name='taxes')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.tax_code} - {self.tax_name}"

    class Meta:
        db_table = 'taxes'
        unique_together = [['company', 'tax_code']]


class SucursalTax(models.Model):
    sucursal = models.ForeignKey(Sucursal, on_delete=models.CASCADE, related_name='sucursal_taxes')
    tax = models.ForeignKey(Tax, on_delete=models.CASCADE, related_name='sucursal_taxes')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'sucursales_taxes'
        unique_together = [['sucursal', 'tax']]


class InventoryFamily(models.Model):
    """Groups items and carries their default tax and stock flags"""
    company = models.ForeignKey(Company, on_delete=models.PROTECT, related_name='inventory_families')
    inv_family_code = models.CharField(max_length=20)
    inv_family_name = models.CharField(max_length=100)
    inv_family_status = models.PositiveSmallIntegerField(choices=STATUS_CHOICES, default=1)
    tax = models.ForeignKey(Tax, on_delete=models.PROTECT, null=True, blank=True, related_name='families')
    inv_is_stockable = models.BooleanField(default=True)
    inv_is_lot_managed = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.inv_family_code} - {self.inv_family_name}"

    class Meta:
        db_table = 'inventory_family'
        verbose_name_plural = 'inventory families'
        unique_together = [['company', 'inv_family_code']]


class Inventory(models.Model):
    """Inventory item (product or service)"""
    TYPE_PRODUCT = 1
    TYPE_SERVICE = 2
    TYPE_CHOICES = [
        (TYPE_PRODUCT, 'Product'),
        (TYPE_SERVICE, 'Service'),
    ]

    company = models.ForeignKey(Company, on_delete=models.PROTECT, related_name='inventories')
    family = models.ForeignKey(InventoryFamily, on_delete=models.PROTECT, related_name='inventories')
    inv_code = models.CharField(max_length=50)
    inv_description = models.CharField(max_length=255)
    inv_description_detail = models.TextField(blank=True, default='')
    inv_status = models.PositiveSmallIntegerField(choices=STATUS_CHOICES, default=1)
    inv_type = models.PositiveSmallIntegerField(choices=TYPE_CHOICES, default=TYPE_PRODUCT)
    inv_has_variants = models.BooleanField(default=False)
    inv_is_exempt = models.BooleanField(default=False)
    inv_is_stockable = models.BooleanField(default=True)
    inv_is_lot_managed = models.BooleanField(default=False)
    inv_url_image = models.CharField(max_length=500, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.inv_code} - {self.inv_description}"

    class Meta:
        db_table = 'inventory'
        verbose_name_plural = 'inventories'
        unique_together = [['family', 'inv_code']]


class InventoryTax(models.Model):
    inventory = models.ForeignKey(Inventory, on_delete=models.CASCADE, related_name='inventory_taxes')
    tax = models.ForeignKey(Tax, on_delete=models.PROTECT, related_name='inventory_taxes')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'inventory_taxes'
        unique_together = [['inventory', 'tax']]


class InventoryVariant(models.Model):
    """Stock keeping unit of an item"""
    inventory = models.ForeignKey(Inventory, on_delete=models.PROTECT, related_name='variants')
    inv_var_sku = models.CharField(max_length=100)
    inv_var_description = models.CharField(max_length=255, blank=True, default='')
    inv_var_status = models.PositiveSmallIntegerField(choices=STATUS_CHOICES, default=1)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.inv_var_sku

    class Meta:
        db_table = 'inventory_variants'
        unique_together = [['inventory', 'inv_var_sku']]


class InventoryAttr(models.Model):
    """Variant attribute such as size or color"""
    company = models.ForeignKey(Company, on_delete=models.PROTECT, related_name='inventory_attrs')
    attr_name = models.CharField(max_length=100)
    attr_description = models.CharField(max_length=255, blank=True, default='')
    attr_status = models.PositiveSmallIntegerField(choices=STATUS_CHOICES, default=1)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.attr_name

    class Meta:
        db_table = 'inventory_attrs'
        unique_together = [['company', 'attr_name']]


class InventoryAttrValue(models.Model):
    attr = models.ForeignKey(InventoryAttr, on_delete=models.CASCADE, related_name='values')
    attr_value = models.CharField(max_length=100)
    attr_value_status = models.PositiveSmallIntegerField(choices=STATUS_CHOICES, default=1)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.attr_value

    class Meta:
        db_table = 'inventory_attrs_values'
        unique_together = [['attr', 'attr_value']]


class InventoryVariantAttr(models.Model):
    variant = models.ForeignKey(InventoryVariant, on_delete=models.CASCADE, related_name='variant_attrs')
    attr_value = models.ForeignKey(InventoryAttrValue, on_delete=models.PROTECT, related_name='variant_attrs')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'inventory_variants_attrs'
        unique_together = [['variant', 'attr_value']]
