"""
Inventory hierarchy rules: code uniqueness inside each parent, and
all-or-nothing creation of items and variants with their associations.
"""
import logging

from django.db import transaction

from erp.core.decimal_utils import ZERO
from erp.core.exceptions import ConflictError, NotFoundError, ValidationError
from erp.core.services import replace_associations, require_existing_ids
from .models import (
    Inventory, InventoryAttr, InventoryAttrValue, InventoryFamily, InventoryTax,
    InventoryVariant, InventoryVariantAttr, SucursalTax, Tax,
)

logger = logging.getLogger(__name__)


def _apply_changes(instance, data):
    for field, value in data.items():
        setattr(instance, field, value)
    instance.save()
    return instance


# Taxes

def _validate_tax_value(tax_type, tax_value):
    if tax_value is None:
        return
    if tax_value < ZERO:
        raise ValidationError(errors=[{'path': 'tax_value', 'msg': 'tax_value cannot be negative'}])
    if tax_type == Tax.TAX_TYPE_PERCENTAGE and tax_value > 100:
        raise ValidationError(errors=[{'path': 'tax_value', 'msg': 'Percentage taxes cannot exceed 100'}])


def _check_tax_code(company_id, tax_code, exclude_id=None):
    queryset = Tax.objects.filter(company_id=company_id, tax_code=tax_code)
    if exclude_id:
        queryset = queryset.exclude(pk=exclude_id)
    if queryset.exists():
        raise ConflictError(f'Tax code {tax_code} already exists in this company')


def create_tax(company_id, data):
    _check_tax_code(company_id, data['tax_code'])
    _validate_tax_value(data.get('tax_type', Tax.TAX_TYPE_PERCENTAGE), data.get('tax_value'))
    return Tax.objects.create(company_id=company_id, **data)


def update_tax(tax, data):
    if 'tax_code' in data:
        _check_tax_code(tax.company_id, data['tax_code'], exclude_id=tax.pk)
    _validate_tax_value(data.get('tax_type', tax.tax_type), data.get('tax_value', tax.tax_value))
    return _apply_changes(tax, data)


@transaction.atomic
def assign_sucursal_taxes(sucursal, tax_ids, remove_missing=True):
    tax_ids = require_existing_ids(Tax.objects.filter(company_id=sucursal.company_id), tax_ids, 'tax_ids')
    return replace_associations(SucursalTax, 'sucursal', sucursal, 'tax', tax_ids, remove_missing=remove_missing)


# Families

def _check_family_code(company_id, code, exclude_id=None):
    queryset = InventoryFamily.objects.filter(company_id=company_id, inv_family_code=code)
    if exclude_id:
        queryset = queryset.exclude(pk=exclude_id)
    if queryset.exists():
        raise ConflictError(f'Family code {code} already exists in this company')


def _check_company_tax(company_id, tax_id, field_name='id_tax'):
    if tax_id is not None and not Tax.objects.filter(pk=tax_id, company_id=company_id).exists():
        raise ValidationError(errors=[{'path': field_name, 'msg': f'Tax {tax_id} does not exist in this company'}])


def create_family(company_id, data):
    _check_family_code(company_id, data['inv_family_code'])
    _check_company_tax(company_id, data.get('tax_id'))
    family = InventoryFamily.objects.create(company_id=company_id, **data)
    logger.info(f"Family {family.inv_family_code} created for company {company_id}")
    return family


def update_family(family, data):
    if 'inv_family_code' in data:
        _check_family_code(family.company_id, data['inv_family_code'], exclude_id=family.pk)
    if 'tax_id' in data:
        _check_company_tax(family.company_id, data['tax_id'])
    return _apply_changes(family, data)


def get_family(company_id, family_id):
    family = InventoryFamily.objects.filter(pk=family_id, company_id=company_id).first()
    if family is None:
        raise NotFoundError('Inventory family not found')
    return family


# Items

def _check_inventory_code(family_id, code, exclude_id=None):
    queryset = Inventory.objects.filter(family_id=family_id, inv_code=code)
    if exclude_id:
        queryset = queryset.exclude(pk=exclude_id)
    if queryset.exists():
        raise ConflictError(f'Inventory code {code} already exists in this family')


def get_inventory(company_id, inventory_id):
    inventory = Inventory.objects.select_related('family').filter(pk=inventory_id, company_id=company_id).first()
    if inventory is None:
        raise NotFoundError('Inventory not found')
    return inventory


@transaction.atomic
def create_inventory(company_id, data, taxes=None, variants=None):
    """
    Create an item with its taxes and, optionally, its variants.
    Every referenced tax and attribute value is checked before any row is written.
    """
    data = dict(data)
    family = get_family(company_id, data.pop('family_id'))
    _check_inventory_code(family.pk, data['inv_code'])
    tax_ids = require_existing_ids(Tax.objects.filter(company_id=company_id), taxes, 'taxes')

    variants = variants or []
    skus = [v['inv_var_sku'] for v in variants]
    if len(skus) != len(set(skus)):
        raise ConflictError('Variant SKUs must be unique within the item')
    variant_attr_ids = [
        _company_attr_value_ids(company_id, v.get('attr_values')) for v in variants
    ]

    data.setdefault('inv_is_stockable', family.inv_is_stockable)
    data.setdefault('inv_is_lot_managed', family.inv_is_lot_managed)
    if data.get('inv_type') == Inventory.TYPE_SERVICE:
        data['inv_is_stockable'] = False
        data['inv_is_lot_managed'] = False
    if data['inv_is_lot_managed'] and not data['inv_is_stockable']:
        raise ValidationError(errors=[{'path': 'inv_is_lot_managed',
                                       'msg': 'Only stockable items can be lot managed'}])
    if variants:
        data['inv_has_variants'] = True

    inventory = Inventory.objects.create(company_id=company_id, family=family, **data)
    replace_associations(InventoryTax, 'inventory', inventory, 'tax', tax_ids)
    for variant_data, attr_ids in zip(variants, variant_attr_ids):
        variant = InventoryVariant.objects.create(
            inventory=inventory,
            inv_var_sku=variant_data['inv_var_sku'],
            inv_var_description=variant_data.get('inv_var_description', ''),
        )
        replace_associations(InventoryVariantAttr, 'variant', variant, 'attr_value', attr_ids)

    logger.info(f"Inventory {inventory.inv_code} created in family {family.inv_family_code} "
                f"with {len(tax_ids)} taxes and {len(variants)} variants")
    return inventory


@transaction.atomic
def update_inventory(inventory, data, taxes=None):
    data = dict(data)
    if 'family_id' in data:
        family = get_family(inventory.company_id, data.pop('family_id'))
        data['family'] = family
    family_id = data['family'].pk if 'family' in data else inventory.family_id
    if 'inv_code' in data or family_id != inventory.family_id:
        _check_inventory_code(family_id, data.get('inv_code', inventory.inv_code), exclude_id=inventory.pk)

    inventory = _apply_changes(inventory, data)
    if taxes is not None:
        tax_ids = require_existing_ids(Tax.objects.filter(company_id=inventory.company_id), taxes, 'taxes')
        replace_associations(InventoryTax, 'inventory', inventory, 'tax', tax_ids)
    return inventory


@transaction.atomic
def assign_inventory_taxes(inventory, tax_ids, remove_missing=True):
    tax_ids = require_existing_ids(Tax.objects.filter(company_id=inventory.company_id), tax_ids, 'taxes')
    return replace_associations(InventoryTax, 'inventory', inventory, 'tax', tax_ids, remove_missing=remove_missing)


# Variants

def _company_attr_value_ids(company_id, attr_values):
    return require_existing_ids(
        InventoryAttrValue.objects.filter(attr__company_id=company_id), attr_values, 'attr_values'
    )


def _check_sku(inventory_id, sku, exclude_id=None):
    queryset = InventoryVariant.objects.filter(inventory_id=inventory_id, inv_var_sku=sku)
    if exclude_id:
        queryset = queryset.exclude(pk=exclude_id)
    if queryset.exists():
        raise ConflictError(f'SKU {sku} already exists for this item')


def get_variant(company_id, variant_id):
    variant = (
        InventoryVariant.objects.select_related('inventory')
        .filter(pk=variant_id, inventory__company_id=company_id)
        .first()
    )
    if variant is None:
        raise NotFoundError('Inventory variant not found')
    return variant


@transaction.atomic
def create_variant(company_id, inventory_id, data, attr_values=None):
    inventory = get_inventory(company_id, inventory_id)
    _check_sku(inventory.pk, data['inv_var_sku'])
    attr_ids = _company_attr_value_ids(company_id, attr_values)

    variant = InventoryVariant.objects.create(inventory=inventory, **data)
    replace_associations(InventoryVariantAttr, 'variant', variant, 'attr_value', attr_ids)
    if not inventory.inv_has_variants:
        inventory.inv_has_variants = True
        inventory.save(update_fields=['inv_has_variants', 'updated_at'])
    logger.info(f"Variant {variant.inv_var_sku} created for inventory {inventory.pk}")
    return variant


@transaction.atomic
def update_variant(variant, data, attr_values=None):
    if 'inv_var_sku' in data:
        _check_sku(variant.inventory_id, data['inv_var_sku'], exclude_id=variant.pk)
    variant = _apply_changes(variant, data)
    if attr_values is not None:
        attr_ids = _company_attr_value_ids(variant.inventory.company_id, attr_values)
        replace_associations(InventoryVariantAttr, 'variant', variant, 'attr_value', attr_ids)
    return variant


# Attributes

def _check_attr_name(company_id, name, exclude_id=None):
    queryset = InventoryAttr.objects.filter(company_id=company_id, attr_name__iexact=name)
    if exclude_id:
        queryset = queryset.exclude(pk=exclude_id)
    if queryset.exists():
        raise ConflictError(f'Attribute {name} already exists in this company')


def _check_attr_values(values):
    lowered = [v.strip().lower() for v in values]
    if len(lowered) != len(set(lowered)):
        raise ConflictError('Attribute values must be unique within the attribute')


@transaction.atomic
def create_attr(company_id, data, values=None):
    _check_attr_name(company_id, data['attr_name'])
    values = values or []
    _check_attr_values(values)
    attr = InventoryAttr.objects.create(company_id=company_id, **data)
    InventoryAttrValue.objects.bulk_create([InventoryAttrValue(attr=attr, attr_value=v) for v in values])
    return attr


def update_attr(attr, data):
    if 'attr_name' in data:
        _check_attr_name(attr.company_id, data['attr_name'], exclude_id=attr.pk)
    return _apply_changes(attr, data)


def add_attr_value(attr, value):
    if attr.values.filter(attr_value__iexact=value).exists():
        raise ConflictError(f'Value {value} already exists for attribute {attr.attr_name}')
    return InventoryAttrValue.objects.create(attr=attr, attr_value=value)


def get_attr(company_id, attr_id):
    attr = InventoryAttr.objects.filter(pk=attr_id, company_id=company_id).first()
    if attr is None:
        raise NotFoundError('Attribute not found')
    return attr
