"""
Stock ledger.

Every stock change is an ``InventoryMovement`` row written together with the
balance rows it affects, inside one transaction. Balance rows are created on
first use and locked with ``SELECT ... FOR UPDATE`` in ascending storage id
order, variant balance before lot balance.
"""
import logging
import uuid
from datetime import timedelta

from django.db import transaction
from django.db.models import Case, Count, DecimalField, ProtectedError, Q, Sum, Value, When
from django.db.models.functions import Coalesce
from django.utils import timezone

from erp.catalog.models import InventoryVariant
from erp.core.decimal_utils import (
    QUANTITY_DECIMAL_PLACES, QUANTITY_MAX_DIGITS, QUANTITY_QUANTIZER, ZERO, check_digits, to_decimal,
)
from erp.core.exceptions import (
    ConflictError, InsufficientStockError, NotFoundError, ValidationError,
)
from erp.currencies.models import Currency
from .models import (
    MOVEMENT_IN, MOVEMENT_OUT, MOVEMENT_TRANSFER, MOVEMENT_TYPE_CHOICES, TRANSFER_DESTINATION,
    TRANSFER_SOURCE, InventoryLot, InventoryLotStorage, InventoryMovement, InventoryStorage,
    InventoryVariantStorage,
)
from .validators import validate_lot_data

logger = logging.getLogger(__name__)

MOVEMENT_TYPES = {choice[0] for choice in MOVEMENT_TYPE_CHOICES}
EXPIRING_SOON_DAYS = 30


def _apply_changes(instance, data):
    for field, value in data.items():
        setattr(instance, field, value)
    instance.save()
    return instance


# Storages

def _check_storage_code(company_id, code, exclude_id=None):
    queryset = InventoryStorage.objects.filter(company_id=company_id, inv_storage_code=code)
    if exclude_id:
        queryset = queryset.exclude(pk=exclude_id)
    if queryset.exists():
        raise ConflictError(f'Storage code {code} already exists in this company')


def _check_storage_sucursal(company_id, sucursal):
    if sucursal is not None and sucursal.company_id != company_id:
        raise ValidationError(errors=[{'path': 'id_sucursal', 'msg': 'Sucursal belongs to a different company'}])


def get_storage(company_id, storage_id):
    storage = InventoryStorage.objects.filter(pk=storage_id, company_id=company_id).first()
    if storage is None:
        raise NotFoundError('Storage not found')
    return storage


def create_storage(company_id, data):
    _check_storage_code(company_id, data['inv_storage_code'])
    _check_storage_sucursal(company_id, data.get('sucursal'))
    storage = InventoryStorage.objects.create(company_id=company_id, **data)
    logger.info(f"Storage {storage.inv_storage_code} created for company {company_id}")
    return storage


def update_storage(storage, data):
    if 'inv_storage_code' in data:
        _check_storage_code(storage.company_id, data['inv_storage_code'], exclude_id=storage.pk)
    if 'sucursal' in data:
        _check_storage_sucursal(storage.company_id, data['sucursal'])
    return _apply_changes(storage, data)


# Lots

def _lot_field_values(lot):
    return {
        'lot_number': lot.lot_number,
        'lot_origin': lot.lot_origin,
        'lot_unit_cost': lot.lot_unit_cost,
        'lot_unit_cost_ref': lot.lot_unit_cost_ref,
        'expiration_date': lot.expiration_date,
        'manufacture_date': lot.manufacture_date,
    }


def _check_lot_data(data):
    result = validate_lot_data(data)
    if not result['is_valid']:
        raise ValidationError('Invalid lot data', errors=result['errors'])


def _check_lot_number(company_id, lot_number, exclude_id=None):
    queryset = InventoryLot.objects.filter(company_id=company_id, lot_number=lot_number)
    if exclude_id:
        queryset = queryset.exclude(pk=exclude_id)
    if queryset.exists():
        raise ConflictError(f'Lot number {lot_number} already exists in this company')


def _check_lot_currencies(data):
    for field in ('lot_unit_currency_id', 'lot_unit_currency_ref_id'):
        currency_id = data.get(field)
        if currency_id is not None and not Currency.objects.filter(pk=currency_id).exists():
            raise ValidationError(errors=[{'path': field, 'msg': f'Currency {currency_id} does not exist'}])


def get_lot(company_id, lot_id):
    lot = InventoryLot.objects.select_related('variant').filter(pk=lot_id, company_id=company_id).first()
    if lot is None:
        raise NotFoundError('Lot not found')
    return lot


def create_lot(company_id, data):
    data = dict(data)
    variant = InventoryVariant.objects.filter(pk=data.pop('variant_id'), inventory__company_id=company_id).first()
    if variant is None:
        raise NotFoundError('Inventory variant not found')
    _check_lot_data(data)
    _check_lot_number(company_id, data['lot_number'])
    _check_lot_currencies(data)
    lot = InventoryLot.objects.create(company_id=company_id, variant=variant, **data)
    logger.info(f"Lot {lot.lot_number} created for variant {variant.pk}")
    return lot


def update_lot(lot, data):
    data = dict(data)
    if 'variant_id' in data and data['variant_id'] != lot.variant_id:
        raise ValidationError(errors=[{'path': 'inv_var_id', 'msg': 'The variant of a lot cannot be changed'}])
    data.pop('variant_id', None)
    merged = _lot_field_values(lot)
    merged.update(data)
    _check_lot_data(merged)
    if 'lot_number' in data:
        _check_lot_number(lot.company_id, data['lot_number'], exclude_id=lot.pk)
    _check_lot_currencies(data)
    return _apply_changes(lot, data)


def delete_lot(lot):
    """Hard delete. Lots referenced by movements or balances are kept."""
    lot_number = lot.lot_number
    try:
        lot.delete()
    except ProtectedError:
        logger.warning(f"Refused to delete lot {lot_number}: it has movements or balances")
        raise ConflictError('Lot has movements or balances and cannot be deleted')
    logger.info(f"Lot {lot_number} deleted")


def get_lots_summary(company_id, variant_id=None):
    today = timezone.localdate()
    queryset = InventoryLot.objects.filter(company_id=company_id)
    if variant_id is not None:
        queryset = queryset.filter(variant_id=variant_id)
    active = Q(lot_status=1)
    return queryset.aggregate(
        total_lots=Count('id'),
        active_lots=Count('id', filter=active),
        inactive_lots=Count('id', filter=~active),
        expiring_soon=Count('id', filter=active & Q(
            expiration_date__gte=today,
            expiration_date__lte=today + timedelta(days=EXPIRING_SOON_DAYS),
        )),
        expired_lots=Count('id', filter=active & Q(expiration_date__lt=today)),
    )


# Ledger

def _clean_quantity(quantity):
    quantity = to_decimal(quantity, 'quantity')
    if quantity <= ZERO:
        raise ValidationError(errors=[{'path': 'quantity', 'msg': 'quantity must be greater than 0'}])
    check_digits(quantity, 'quantity', QUANTITY_MAX_DIGITS, QUANTITY_DECIMAL_PLACES)
    if quantity != quantity.quantize(QUANTITY_QUANTIZER):
        raise ValidationError(errors=[{'path': 'quantity', 'msg': 'quantity supports at most 3 decimal places'}])
    return quantity


def _active_storage(storage_id, company_id, field_name='id_inv_storage'):
    storage = InventoryStorage.objects.filter(pk=storage_id).first()
    if storage is None:
        raise NotFoundError('Storage not found')
    if storage.company_id != company_id:
        raise ValidationError(errors=[{'path': field_name, 'msg': 'Storage belongs to a different company'}])
    if storage.inv_storage_status != 1:
        raise ValidationError(errors=[{'path': field_name, 'msg': 'Storage is inactive'}])
    return storage


def _resolve_stock_target(variant_id, lot_id, company_id=None):
    """Load the variant (and lot) a movement applies to and check it can hold stock."""
    variant = InventoryVariant.objects.select_related('inventory').filter(pk=variant_id).first()
    if variant is None or (company_id is not None and variant.inventory.company_id != company_id):
        raise NotFoundError('Inventory variant not found')
    inventory = variant.inventory
    if inventory.inv_status != 1 or variant.inv_var_status != 1:
        raise ValidationError('Inventory item or variant is inactive')
    if not inventory.inv_is_stockable:
        raise ValidationError(f'Inventory {inventory.inv_code} is not stockable')

    lot = None
    if lot_id is not None:
        lot = InventoryLot.objects.filter(pk=lot_id).first()
        if lot is None:
            raise NotFoundError('Lot not found')
        if lot.variant_id != variant.pk:
            raise ValidationError(errors=[{'path': 'inv_lot_id', 'msg': 'Lot does not belong to the variant'}])
    elif inventory.inv_is_lot_managed:
        raise ValidationError(errors=[{'path': 'inv_lot_id', 'msg': 'inv_lot_id is required for lot managed items'}])
    return variant, lot


def _locked_row(model, defaults=None, **lookup):
    model.objects.get_or_create(defaults=defaults or {}, **lookup)
    return model.objects.select_for_update().get(**lookup)


def _lock_balances(variant, storage_ids, lot=None):
    """Balance rows per storage id, created with zero stock on first use and locked."""
    locked = {}
    for storage_id in sorted(set(storage_ids)):
        variant_balance = _locked_row(InventoryVariantStorage, variant_id=variant.pk, storage_id=storage_id)
        lot_balance = None
        if lot is not None:
            lot_balance = _locked_row(InventoryLotStorage, defaults={'variant_id': variant.pk},
                                      lot_id=lot.pk, storage_id=storage_id)
        locked[storage_id] = (variant_balance, lot_balance)
    return locked


def _adjust_row(row, prefix, delta, user, allow_negative):
    stock_field = f'{prefix}_stock'
    prev_field = f'{prefix}_stock_prev'
    current = getattr(row, stock_field)
    new_stock = current + delta
    if new_stock < ZERO and not allow_negative:
        logger.warning(f"Rejected stock change of {delta} on {row._meta.db_table} #{row.pk}: available {current}")
        raise InsufficientStockError(f'Insufficient stock: available {current}, requested {abs(delta)}')
    field = row._meta.get_field(stock_field)
    check_digits(new_stock, stock_field, field.max_digits, field.decimal_places)
    setattr(row, prev_field, current)
    setattr(row, stock_field, new_stock)
    row.last_user = user
    row.save(update_fields=[stock_field, prev_field, 'last_user', 'updated_at'])


def _adjust(balances, delta, user, allow_negative):
    variant_balance, lot_balance = balances
    _adjust_row(variant_balance, 'inv_vs', delta, user, allow_negative)
    if lot_balance is not None:
        _adjust_row(lot_balance, 'inv_ls', delta, user, allow_negative)


def _actor(user):
    return user if user is not None and user.is_authenticated else None


@transaction.atomic
def record_movement(storage_id, variant_id, movement_type, quantity, user, lot_id=None, reason=None,
                    related_doc=None, destination_storage_id=None, allow_negative=False, company_id=None):
    """
    Record an In, Out or Transfer movement and update the affected balances.

    Returns the list of created movements: one for In/Out, two for a transfer.
    """
    if movement_type not in MOVEMENT_TYPES:
        raise ValidationError(errors=[{'path': 'movement_type', 'msg': 'movement_type must be 1, 2 or 3'}])
    if movement_type == MOVEMENT_TRANSFER:
        if destination_storage_id is None:
            raise ValidationError(errors=[{'path': 'destination_storage_id',
                                           'msg': 'destination_storage_id is required for transfers'}])
        return record_transfer(storage_id, destination_storage_id, variant_id, quantity, user, lot_id=lot_id,
                               reason=reason, related_doc=related_doc, allow_negative=allow_negative,
                               company_id=company_id)

    quantity = _clean_quantity(quantity)
    variant, lot = _resolve_stock_target(variant_id, lot_id, company_id)
    storage = _active_storage(storage_id, variant.inventory.company_id)

    balances = _lock_balances(variant, [storage.pk], lot)
    delta = quantity if movement_type == MOVEMENT_IN else -quantity
    _adjust(balances[storage.pk], delta, _actor(user), allow_negative)

    movement = InventoryMovement.objects.create(
        storage=storage,
        variant=variant,
        lot=lot,
        movement_type=movement_type,
        quantity=quantity,
        movement_reason=reason or '',
        related_doc=related_doc or '',
        user=_actor(user),
    )
    logger.info(f"Movement {movement.pk} ({movement.get_movement_type_display()}) of {quantity} "
                f"for variant {variant.pk} at storage {storage.pk}")
    return [movement]


@transaction.atomic
def record_transfer(source_storage_id, destination_storage_id, variant_id, quantity, user, lot_id=None,
                    reason=None, related_doc=None, allow_negative=False, company_id=None):
    """Move stock between two storages of the same company as a pair of linked movements."""
    if source_storage_id == destination_storage_id:
        raise ValidationError(errors=[{'path': 'destination_storage_id',
                                       'msg': 'Source and destination storages must differ'}])
    quantity = _clean_quantity(quantity)
    variant, lot = _resolve_stock_target(variant_id, lot_id, company_id)
    item_company_id = variant.inventory.company_id
    source = _active_storage(source_storage_id, item_company_id)
    destination = _active_storage(destination_storage_id, item_company_id, 'destination_storage_id')
    return _post_transfer(source, destination, variant, lot, quantity, _actor(user),
                          reason or '', related_doc or '', allow_negative)


def _post_transfer(source, destination, variant, lot, quantity, user, reason, related_doc, allow_negative,
                   correlation_id=None, reverses=(None, None)):
    balances = _lock_balances(variant, [source.pk, destination.pk], lot)
    _adjust(balances[source.pk], -quantity, user, allow_negative)
    _adjust(balances[destination.pk], quantity, user, allow_negative)

    correlation_id = correlation_id or uuid.uuid4()
    common = {
        'variant': variant,
        'lot': lot,
        'movement_type': MOVEMENT_TRANSFER,
        'quantity': quantity,
        'movement_reason': reason,
        'related_doc': related_doc,
        'user': user,
        'correlation_id': correlation_id,
    }
    outgoing = InventoryMovement.objects.create(storage=source, transfer_role=TRANSFER_SOURCE,
                                                reverses=reverses[0], **common)
    incoming = InventoryMovement.objects.create(storage=destination, transfer_role=TRANSFER_DESTINATION,
                                                reverses=reverses[1], **common)
    logger.info(f"Transfer {correlation_id} of {quantity} for variant {variant.pk} "
                f"from storage {source.pk} to storage {destination.pk}")
    return [outgoing, incoming]


def _transfer_legs(movement):
    legs = {
        leg.transfer_role: leg
        for leg in InventoryMovement.objects.select_for_update(of=('self',)).filter(
            correlation_id=movement.correlation_id,
            movement_type=MOVEMENT_TRANSFER,
            reverses__isnull=True,
        ).select_related('storage', 'variant', 'lot')
    }
    if set(legs) != {TRANSFER_SOURCE, TRANSFER_DESTINATION}:
        raise ConflictError('Transfer is incomplete and cannot be reversed')
    return legs[TRANSFER_SOURCE], legs[TRANSFER_DESTINATION]


def _already_reversed(movement):
    return InventoryMovement.objects.filter(reverses=movement).exists()


@transaction.atomic
def reverse_movement(movement_id, user, reason=None, company_id=None):
    """
    Post the compensating movement(s) for ``movement_id``.

    In is compensated by Out, Out by In and a transfer leg by a transfer in
    the opposite direction covering both legs. A movement is reversed once.
    """
    movement = (
        InventoryMovement.objects.select_for_update(of=('self',))
        .select_related('storage', 'variant', 'lot')
        .filter(pk=movement_id)
        .first()
    )
    if movement is None or (company_id is not None and movement.storage.company_id != company_id):
        raise NotFoundError('Movement not found')
    if movement.reverses_id is not None:
        raise ValidationError('A reversal movement cannot be reversed')
    if _already_reversed(movement):
        raise ConflictError('Movement has already been reversed')

    actor = _actor(user)
    reason = reason or f'Reversal of movement {movement.pk}'

    if movement.movement_type == MOVEMENT_TRANSFER:
        source_leg, destination_leg = _transfer_legs(movement)
        if _already_reversed(source_leg) or _already_reversed(destination_leg):
            raise ConflictError('Movement has already been reversed')
        created = _post_transfer(
            destination_leg.storage, source_leg.storage, movement.variant, movement.lot, movement.quantity,
            actor, reason, movement.related_doc, allow_negative=False,
            correlation_id=movement.correlation_id, reverses=(destination_leg, source_leg),
        )
    else:
        balances = _lock_balances(movement.variant, [movement.storage_id], movement.lot)
        if movement.movement_type == MOVEMENT_IN:
            movement_type, delta = MOVEMENT_OUT, -movement.quantity
        else:
            movement_type, delta = MOVEMENT_IN, movement.quantity
        _adjust(balances[movement.storage_id], delta, actor, allow_negative=False)
        created = [InventoryMovement.objects.create(
            storage=movement.storage,
            variant=movement.variant,
            lot=movement.lot,
            movement_type=movement_type,
            quantity=movement.quantity,
            movement_reason=reason,
            related_doc=movement.related_doc,
            user=actor,
            correlation_id=movement.correlation_id,
            reverses=movement,
        )]

    logger.info(f"Movement {movement.pk} reversed by {[m.pk for m in created]}")
    return created


# Queries

def get_movement_statistics(company_id, date_from=None, date_to=None, movement_type=None):
    queryset = InventoryMovement.objects.filter(storage__company_id=company_id)
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)
    if movement_type:
        queryset = queryset.filter(movement_type=movement_type)

    def total(condition):
        return Coalesce(
            Sum(Case(When(condition, then='quantity'), default=Value(ZERO),
                     output_field=DecimalField(max_digits=18, decimal_places=3))),
            Value(ZERO),
            output_field=DecimalField(max_digits=18, decimal_places=3),
        )

    stats = queryset.aggregate(
        total_movements=Count('id'),
        total_in=total(Q(movement_type=MOVEMENT_IN)),
        total_out=total(Q(movement_type=MOVEMENT_OUT)),
        # each transfer counted once, by its source leg
        total_transfer=total(Q(movement_type=MOVEMENT_TRANSFER, transfer_role=TRANSFER_SOURCE)),
        unique_variants=Count('variant', distinct=True),
        unique_storages=Count('storage', distinct=True),
    )
    for key in ('total_in', 'total_out', 'total_transfer'):
        stats[key] = stats[key].quantize(QUANTITY_QUANTIZER)
    return stats


def _stock_summary(queryset, prefix):
    total_field = DecimalField(max_digits=18, decimal_places=3)
    summary = queryset.aggregate(
        total_stock=Sum(f'{prefix}_stock', output_field=total_field),
        total_reserved=Sum(f'{prefix}_stock_reserved', output_field=total_field),
        total_committed=Sum(f'{prefix}_stock_committed', output_field=total_field),
        total_prev=Sum(f'{prefix}_stock_prev', output_field=total_field),
        total_min=Sum(f'{prefix}_stock_min', output_field=total_field),
        storage_locations=Count('storage', distinct=True),
    )
    for key, value in summary.items():
        if key != 'storage_locations':
            summary[key] = (value or ZERO).quantize(QUANTITY_QUANTIZER)
    return summary


def get_variant_stock_summary(variant_id, storage_id=None):
    """Stock totals of a variant across its storages, or in one storage."""
    queryset = InventoryVariantStorage.objects.filter(variant_id=variant_id)
    if storage_id is not None:
        queryset = queryset.filter(storage_id=storage_id)
    return _stock_summary(queryset, 'inv_vs')


def get_lot_stock_summary(lot_id, storage_id=None):
    """Stock totals of a lot across its storages, or in one storage."""
    queryset = InventoryLotStorage.objects.filter(lot_id=lot_id)
    if storage_id is not None:
        queryset = queryset.filter(storage_id=storage_id)
    return _stock_summary(queryset, 'inv_ls')
