"""
Test suite for storages, lots and the stock ledger
"""
from datetime import date, timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from erp.core.exceptions import (
    ConflictError, ImmutableRecordError, InsufficientStockError, NotFoundError, ValidationError,
)
from erp.core.test_utils import AuthenticatedAPIClient, TestDataFactory
from .models import (
    MOVEMENT_IN, MOVEMENT_OUT, MOVEMENT_TRANSFER, TRANSFER_DESTINATION, TRANSFER_SOURCE, InventoryLot,
    InventoryLotStorage, InventoryMovement, InventoryVariantStorage,
)
from .validators import validate_lot_data
from . import services


def stock_of(variant, storage):
    row = InventoryVariantStorage.objects.filter(variant=variant, storage=storage).first()
    return row.inv_vs_stock if row else Decimal('0')


def lot_stock_of(lot, storage):
    row = InventoryLotStorage.objects.filter(lot=lot, storage=storage).first()
    return row.inv_ls_stock if row else Decimal('0')


class LotValidatorTests(TestCase):
    def test_valid_lot(self):
        result = validate_lot_data({
            'lot_number': 'LOT-1',
            'lot_unit_cost': '10.5',
            'manufacture_date': '2024-01-01',
            'expiration_date': '2025-01-01',
        })
        self.assertTrue(result['is_valid'])
        self.assertEqual(result['errors'], [])

    def test_collects_every_error(self):
        result = validate_lot_data({
            'lot_number': '',
            'lot_origin': 'x' * 101,
            'lot_unit_cost': '-1',
            'lot_unit_cost_ref': '-2',
            'manufacture_date': '2025-01-01',
            'expiration_date': '2024-01-01',
        })
        self.assertFalse(result['is_valid'])
        self.assertEqual([e['msg'] for e in result['errors']], [
            'Lot number is required',
            'Lot origin cannot exceed 100 characters',
            'Lot unit cost cannot be negative',
            'Lot unit cost reference cannot be negative',
            'Expiration date must be after manufacture date',
        ])

    def test_lot_number_too_long(self):
        result = validate_lot_data({'lot_number': 'L' * 101})
        self.assertEqual(result['errors'], [
            {'path': 'lot_number', 'msg': 'Lot number cannot exceed 100 characters'},
        ])

    def test_same_day_expiration_rejected(self):
        result = validate_lot_data({
            'lot_number': 'LOT-1',
            'manufacture_date': date(2024, 1, 1),
            'expiration_date': date(2024, 1, 1),
        })
        self.assertFalse(result['is_valid'])


class LedgerServiceTests(TestCase):
    def setUp(self):
        self.company = TestDataFactory.create_company()
        self.user = TestDataFactory.create_user()
        self.storage = TestDataFactory.create_storage(self.company, code='MAIN')
        self.other_storage = TestDataFactory.create_storage(self.company, code='AUX')
        self.variant = TestDataFactory.create_stocked_variant(self.company)

    def test_in_then_out_restores_balance(self):
        services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_IN, '5', self.user)
        self.assertEqual(stock_of(self.variant, self.storage), Decimal('5.000'))
        services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_OUT, '5', self.user)
        self.assertEqual(stock_of(self.variant, self.storage), Decimal('0.000'))
        self.assertEqual(InventoryMovement.objects.count(), 2)

    def test_previous_stock_tracked(self):
        services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_IN, '5', self.user)
        services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_IN, '2.5', self.user)
        balance = InventoryVariantStorage.objects.get(variant=self.variant, storage=self.storage)
        self.assertEqual(balance.inv_vs_stock, Decimal('7.500'))
        self.assertEqual(balance.inv_vs_stock_prev, Decimal('5.000'))
        self.assertEqual(balance.last_user, self.user)

    def test_out_exceeding_stock_rejected(self):
        services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_IN, '3', self.user)
        with self.assertRaises(InsufficientStockError) as ctx:
            services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_OUT, '4', self.user)
        self.assertEqual(str(ctx.exception.detail), 'Insufficient stock: available 3.000, requested 4')
        self.assertEqual(stock_of(self.variant, self.storage), Decimal('3.000'))
        self.assertEqual(InventoryMovement.objects.filter(movement_type=MOVEMENT_OUT).count(), 0)

    def test_out_from_empty_storage_writes_nothing(self):
        with self.assertRaises(InsufficientStockError):
            services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_OUT, '1', self.user)
        self.assertFalse(InventoryMovement.objects.exists())
        self.assertFalse(InventoryVariantStorage.objects.exists())

    def test_allow_negative(self):
        services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_OUT, '2', self.user, allow_negative=True)
        self.assertEqual(stock_of(self.variant, self.storage), Decimal('-2.000'))

    def test_quantity_must_be_positive(self):
        for quantity in ('0', '-1'):
            with self.assertRaises(ValidationError) as ctx:
                services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_IN, quantity, self.user)
            self.assertEqual(ctx.exception.errors, [{'path': 'quantity', 'msg': 'quantity must be greater than 0'}])

    def test_quantity_precision(self):
        with self.assertRaises(ValidationError):
            services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_IN, '1.0001', self.user)

    def test_unknown_movement_type(self):
        with self.assertRaises(ValidationError):
            services.record_movement(self.storage.pk, self.variant.pk, 9, '1', self.user)

    def test_lot_managed_requires_lot(self):
        variant = TestDataFactory.create_stocked_variant(self.company, lot_managed=True)
        with self.assertRaises(ValidationError) as ctx:
            services.record_movement(self.storage.pk, variant.pk, MOVEMENT_IN, '1', self.user)
        self.assertEqual(ctx.exception.errors,
                         [{'path': 'inv_lot_id', 'msg': 'inv_lot_id is required for lot managed items'}])

    def test_lot_balance_follows_variant_balance(self):
        variant = TestDataFactory.create_stocked_variant(self.company, lot_managed=True)
        lot = TestDataFactory.create_lot(variant)
        services.record_movement(self.storage.pk, variant.pk, MOVEMENT_IN, '10', self.user, lot_id=lot.pk)
        services.record_movement(self.storage.pk, variant.pk, MOVEMENT_OUT, '4', self.user, lot_id=lot.pk)
        lot_balance = InventoryLotStorage.objects.get(lot=lot, storage=self.storage)
        self.assertEqual(lot_balance.inv_ls_stock, Decimal('6.000'))
        self.assertEqual(stock_of(variant, self.storage), Decimal('6.000'))

    def test_lot_of_other_variant_rejected(self):
        other_lot = TestDataFactory.create_lot(TestDataFactory.create_stocked_variant(self.company))
        with self.assertRaises(ValidationError):
            services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_IN, '1', self.user,
                                     lot_id=other_lot.pk)

    def test_non_stockable_item_rejected(self):
        family = TestDataFactory.create_family(self.company, is_stockable=False)
        variant = TestDataFactory.create_variant(TestDataFactory.create_inventory(family))
        with self.assertRaises(ValidationError):
            services.record_movement(self.storage.pk, variant.pk, MOVEMENT_IN, '1', self.user)

    def test_inactive_variant_rejected(self):
        self.variant.inv_var_status = 0
        self.variant.save()
        with self.assertRaises(ValidationError):
            services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_IN, '1', self.user)

    def test_inactive_storage_rejected(self):
        storage = TestDataFactory.create_storage(self.company, status=0)
        with self.assertRaises(ValidationError):
            services.record_movement(storage.pk, self.variant.pk, MOVEMENT_IN, '1', self.user)

    def test_storage_of_other_company_rejected(self):
        foreign = TestDataFactory.create_storage(TestDataFactory.create_company())
        with self.assertRaises(ValidationError):
            services.record_movement(foreign.pk, self.variant.pk, MOVEMENT_IN, '1', self.user)

    def test_variant_of_other_company_not_found(self):
        with self.assertRaises(NotFoundError):
            services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_IN, '1', self.user,
                                     company_id=TestDataFactory.create_company().pk)

    def test_movements_are_append_only(self):
        movement = services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_IN, '1', self.user)[0]
        movement.quantity = Decimal('100')
        with self.assertRaises(ImmutableRecordError):
            movement.save()
        with self.assertRaises(ImmutableRecordError):
            movement.delete()

    def test_balance_overflow_rejected(self):
        services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_IN, '9999999.999', self.user)
        with self.assertRaises(ValidationError) as ctx:
            services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_IN, '1', self.user)
        self.assertEqual(ctx.exception.errors[0]['path'], 'inv_vs_stock')
        self.assertEqual(stock_of(self.variant, self.storage), Decimal('9999999.999'))
        self.assertEqual(InventoryMovement.objects.count(), 1)

    def test_quantity_too_large(self):
        with self.assertRaises(ValidationError) as ctx:
            services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_IN, '10000000', self.user)
        self.assertEqual(ctx.exception.errors[0]['path'], 'quantity')
        with self.assertRaises(ValidationError):
            services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_IN, '1E+40', self.user)


class StockSummaryTests(TestCase):
    def setUp(self):
        self.company = TestDataFactory.create_company()
        self.user = TestDataFactory.create_user()
        self.storage = TestDataFactory.create_storage(self.company, code='MAIN')
        self.other_storage = TestDataFactory.create_storage(self.company, code='AUX')
        self.variant = TestDataFactory.create_stocked_variant(self.company)

    def test_variant_summary_totals_every_column(self):
        services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_IN, '5', self.user)
        services.record_movement(self.other_storage.pk, self.variant.pk, MOVEMENT_IN, '2', self.user)
        services.record_movement(self.other_storage.pk, self.variant.pk, MOVEMENT_IN, '1', self.user)
        InventoryVariantStorage.objects.filter(storage=self.storage).update(
            inv_vs_stock_reserved=Decimal('2'), inv_vs_stock_committed=Decimal('0.5'), inv_vs_stock_min=Decimal('1.5'),
        )
        self.assertEqual(services.get_variant_stock_summary(self.variant.pk), {
            'total_stock': Decimal('8.000'),
            'total_reserved': Decimal('2.000'),
            'total_committed': Decimal('0.500'),
            'total_prev': Decimal('2.000'),
            'total_min': Decimal('1.500'),
            'storage_locations': 2,
        })

    def test_variant_summary_for_one_storage(self):
        services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_IN, '5', self.user)
        services.record_movement(self.other_storage.pk, self.variant.pk, MOVEMENT_IN, '2', self.user)
        summary = services.get_variant_stock_summary(self.variant.pk, self.other_storage.pk)
        self.assertEqual(summary['total_stock'], Decimal('2.000'))
        self.assertEqual(summary['storage_locations'], 1)

    def test_summary_without_balances(self):
        summary = services.get_variant_stock_summary(self.variant.pk)
        self.assertEqual(summary['total_stock'], Decimal('0.000'))
        self.assertEqual(summary['storage_locations'], 0)

    def test_summary_beyond_single_balance_precision(self):
        services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_IN, '9999999.999', self.user)
        services.record_movement(self.other_storage.pk, self.variant.pk, MOVEMENT_IN, '9999999.999', self.user)
        summary = services.get_variant_stock_summary(self.variant.pk)
        self.assertEqual(summary['total_stock'], Decimal('19999999.998'))

    def test_lot_summary(self):
        variant = TestDataFactory.create_stocked_variant(self.company, lot_managed=True)
        lot = TestDataFactory.create_lot(variant)
        services.record_movement(self.storage.pk, variant.pk, MOVEMENT_IN, '10', self.user, lot_id=lot.pk)
        services.record_transfer(self.storage.pk, self.other_storage.pk, variant.pk, '4', self.user, lot_id=lot.pk)
        summary = services.get_lot_stock_summary(lot.pk)
        self.assertEqual(summary['total_stock'], Decimal('10.000'))
        self.assertEqual(summary['total_prev'], Decimal('10.000'))
        self.assertEqual(summary['storage_locations'], 2)
        self.assertEqual(services.get_lot_stock_summary(lot.pk, self.other_storage.pk)['total_stock'],
                         Decimal('4.000'))


class TransferServiceTests(TestCase):
    def setUp(self):
        self.company = TestDataFactory.create_company()
        self.user = TestDataFactory.create_user()
        self.source = TestDataFactory.create_storage(self.company, code='SRC')
        self.destination = TestDataFactory.create_storage(self.company, code='DST')
        self.variant = TestDataFactory.create_stocked_variant(self.company)
        services.record_movement(self.source.pk, self.variant.pk, MOVEMENT_IN, '10', self.user)

    def test_transfer_moves_stock_and_links_legs(self):
        outgoing, incoming = services.record_transfer(self.source.pk, self.destination.pk, self.variant.pk,
                                                      '4', self.user, related_doc='TR-1')
        self.assertEqual(stock_of(self.variant, self.source), Decimal('6.000'))
        self.assertEqual(stock_of(self.variant, self.destination), Decimal('4.000'))
        self.assertEqual(outgoing.correlation_id, incoming.correlation_id)
        self.assertEqual((outgoing.transfer_role, incoming.transfer_role), (TRANSFER_SOURCE, TRANSFER_DESTINATION))
        self.assertEqual({outgoing.movement_type, incoming.movement_type}, {MOVEMENT_TRANSFER})

    def test_transfer_through_record_movement(self):
        movements = services.record_movement(self.source.pk, self.variant.pk, MOVEMENT_TRANSFER, '1', self.user,
                                             destination_storage_id=self.destination.pk)
        self.assertEqual(len(movements), 2)

    def test_transfer_requires_destination(self):
        with self.assertRaises(ValidationError):
            services.record_movement(self.source.pk, self.variant.pk, MOVEMENT_TRANSFER, '1', self.user)

    def test_same_storage_rejected(self):
        with self.assertRaises(ValidationError):
            services.record_transfer(self.source.pk, self.source.pk, self.variant.pk, '1', self.user)

    def test_insufficient_source_leaves_both_balances(self):
        with self.assertRaises(InsufficientStockError):
            services.record_transfer(self.source.pk, self.destination.pk, self.variant.pk, '11', self.user)
        self.assertEqual(stock_of(self.variant, self.source), Decimal('10.000'))
        self.assertEqual(stock_of(self.variant, self.destination), Decimal('0'))
        self.assertFalse(InventoryMovement.objects.filter(movement_type=MOVEMENT_TRANSFER).exists())

    def test_cross_company_destination_rejected(self):
        foreign = TestDataFactory.create_storage(TestDataFactory.create_company())
        with self.assertRaises(ValidationError):
            services.record_transfer(self.source.pk, foreign.pk, self.variant.pk, '1', self.user)

    def test_lot_transfer_moves_lot_balances(self):
        variant = TestDataFactory.create_stocked_variant(self.company, lot_managed=True)
        lot = TestDataFactory.create_lot(variant)
        services.record_movement(self.source.pk, variant.pk, MOVEMENT_IN, '10', self.user, lot_id=lot.pk)
        outgoing, incoming = services.record_transfer(self.source.pk, self.destination.pk, variant.pk, '4',
                                                      self.user, lot_id=lot.pk)
        self.assertEqual((outgoing.lot, incoming.lot), (lot, lot))
        self.assertEqual(lot_stock_of(lot, self.source), Decimal('6.000'))
        self.assertEqual(lot_stock_of(lot, self.destination), Decimal('4.000'))
        self.assertEqual(stock_of(variant, self.source), Decimal('6.000'))
        self.assertEqual(stock_of(variant, self.destination), Decimal('4.000'))

    def test_lot_shortfall_rejects_transfer_covered_by_variant(self):
        variant = TestDataFactory.create_stocked_variant(self.company, lot_managed=True)
        small_lot = TestDataFactory.create_lot(variant, lot_number='LOT-A')
        large_lot = TestDataFactory.create_lot(variant, lot_number='LOT-B')
        services.record_movement(self.source.pk, variant.pk, MOVEMENT_IN, '2', self.user, lot_id=small_lot.pk)
        services.record_movement(self.source.pk, variant.pk, MOVEMENT_IN, '8', self.user, lot_id=large_lot.pk)

        with self.assertRaises(InsufficientStockError):
            services.record_transfer(self.source.pk, self.destination.pk, variant.pk, '5', self.user,
                                     lot_id=small_lot.pk)
        self.assertEqual(stock_of(variant, self.source), Decimal('10.000'))
        self.assertEqual(stock_of(variant, self.destination), Decimal('0'))
        self.assertEqual(lot_stock_of(small_lot, self.source), Decimal('2.000'))
        self.assertEqual(lot_stock_of(small_lot, self.destination), Decimal('0'))
        self.assertFalse(InventoryMovement.objects.filter(movement_type=MOVEMENT_TRANSFER).exists())


class ReversalServiceTests(TestCase):
    def setUp(self):
        self.company = TestDataFactory.create_company()
        self.user = TestDataFactory.create_user()
        self.storage = TestDataFactory.create_storage(self.company, code='MAIN')
        self.other_storage = TestDataFactory.create_storage(self.company, code='AUX')
        self.variant = TestDataFactory.create_stocked_variant(self.company)

    def test_reverse_in(self):
        movement = services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_IN, '5', self.user)[0]
        reversal = services.reverse_movement(movement.pk, self.user)[0]
        self.assertEqual(reversal.movement_type, MOVEMENT_OUT)
        self.assertEqual(reversal.reverses, movement)
        self.assertEqual(reversal.correlation_id, movement.correlation_id)
        self.assertEqual(stock_of(self.variant, self.storage), Decimal('0.000'))

    def test_reverse_out(self):
        services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_IN, '5', self.user)
        out = services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_OUT, '2', self.user)[0]
        reversal = services.reverse_movement(out.pk, self.user, reason='Typo')[0]
        self.assertEqual(reversal.movement_type, MOVEMENT_IN)
        self.assertEqual(reversal.movement_reason, 'Typo')
        self.assertEqual(stock_of(self.variant, self.storage), Decimal('5.000'))

    def test_reverse_twice_conflict(self):
        movement = services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_IN, '5', self.user)[0]
        services.reverse_movement(movement.pk, self.user)
        with self.assertRaises(ConflictError):
            services.reverse_movement(movement.pk, self.user)

    def test_reversal_cannot_be_reversed(self):
        movement = services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_IN, '5', self.user)[0]
        reversal = services.reverse_movement(movement.pk, self.user)[0]
        with self.assertRaises(ValidationError):
            services.reverse_movement(reversal.pk, self.user)

    def test_reverse_in_after_stock_consumed(self):
        movement = services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_IN, '5', self.user)[0]
        services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_OUT, '3', self.user)
        with self.assertRaises(InsufficientStockError):
            services.reverse_movement(movement.pk, self.user)

    def test_reverse_transfer_from_either_leg(self):
        services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_IN, '5', self.user)
        outgoing, incoming = services.record_transfer(self.storage.pk, self.other_storage.pk, self.variant.pk,
                                                      '5', self.user)
        created = services.reverse_movement(incoming.pk, self.user)
        self.assertEqual(len(created), 2)
        self.assertEqual({m.correlation_id for m in created}, {outgoing.correlation_id})
        self.assertEqual(stock_of(self.variant, self.storage), Decimal('5.000'))
        self.assertEqual(stock_of(self.variant, self.other_storage), Decimal('0.000'))
        with self.assertRaises(ConflictError):
            services.reverse_movement(outgoing.pk, self.user)

    def test_reverse_lot_transfer_restores_lot_balances(self):
        variant = TestDataFactory.create_stocked_variant(self.company, lot_managed=True)
        lot = TestDataFactory.create_lot(variant)
        services.record_movement(self.storage.pk, variant.pk, MOVEMENT_IN, '5', self.user, lot_id=lot.pk)
        outgoing, _ = services.record_transfer(self.storage.pk, self.other_storage.pk, variant.pk, '3', self.user,
                                               lot_id=lot.pk)
        created = services.reverse_movement(outgoing.pk, self.user)
        self.assertEqual({m.lot_id for m in created}, {lot.pk})
        self.assertEqual(lot_stock_of(lot, self.storage), Decimal('5.000'))
        self.assertEqual(lot_stock_of(lot, self.other_storage), Decimal('0.000'))
        self.assertEqual(stock_of(variant, self.other_storage), Decimal('0.000'))

    def test_company_scoped_lookup(self):
        movement = services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_IN, '5', self.user)[0]
        with self.assertRaises(NotFoundError):
            services.reverse_movement(movement.pk, self.user, company_id=TestDataFactory.create_company().pk)


class StatisticsTests(TestCase):
    def setUp(self):
        self.company = TestDataFactory.create_company()
        self.user = TestDataFactory.create_user()
        self.storage = TestDataFactory.create_storage(self.company)
        self.other_storage = TestDataFactory.create_storage(self.company)
        self.variant = TestDataFactory.create_stocked_variant(self.company)

    def test_statistics(self):
        services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_IN, '10', self.user)
        services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_OUT, '3', self.user)
        services.record_transfer(self.storage.pk, self.other_storage.pk, self.variant.pk, '2', self.user)

        stats = services.get_movement_statistics(self.company.pk)
        self.assertEqual(stats['total_movements'], 4)
        self.assertEqual(stats['total_in'], Decimal('10.000'))
        self.assertEqual(stats['total_out'], Decimal('3.000'))
        self.assertEqual(stats['total_transfer'], Decimal('2.000'))
        self.assertEqual(stats['unique_variants'], 1)
        self.assertEqual(stats['unique_storages'], 2)

    def test_empty_statistics(self):
        stats = services.get_movement_statistics(self.company.pk)
        self.assertEqual(stats['total_movements'], 0)
        self.assertEqual(stats['total_in'], Decimal('0.000'))

    def test_filters(self):
        services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_IN, '10', self.user)
        tomorrow = timezone.localdate() + timedelta(days=1)
        self.assertEqual(services.get_movement_statistics(self.company.pk, date_from=tomorrow)['total_movements'], 0)
        stats = services.get_movement_statistics(self.company.pk, movement_type=MOVEMENT_OUT)
        self.assertEqual(stats['total_movements'], 0)


class LotServiceTests(TestCase):
    def setUp(self):
        self.company = TestDataFactory.create_company()
        self.variant = TestDataFactory.create_stocked_variant(self.company, lot_managed=True)

    def test_duplicate_lot_number_in_company(self):
        services.create_lot(self.company.pk, {'variant_id': self.variant.pk, 'lot_number': 'L1'})
        with self.assertRaises(ConflictError):
            services.create_lot(self.company.pk, {'variant_id': self.variant.pk, 'lot_number': 'L1'})

    def test_invalid_dates_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            services.create_lot(self.company.pk, {
                'variant_id': self.variant.pk,
                'lot_number': 'L1',
                'manufacture_date': date(2024, 6, 1),
                'expiration_date': date(2024, 1, 1),
            })
        self.assertEqual(ctx.exception.errors[0]['path'], 'expiration_date')

    def test_variant_cannot_change(self):
        lot = TestDataFactory.create_lot(self.variant)
        other = TestDataFactory.create_stocked_variant(self.company)
        with self.assertRaises(ValidationError):
            services.update_lot(lot, {'variant_id': other.pk})

    def test_delete_lot_with_movements_conflict(self):
        lot = TestDataFactory.create_lot(self.variant)
        storage = TestDataFactory.create_storage(self.company)
        services.record_movement(storage.pk, self.variant.pk, MOVEMENT_IN, '1', None, lot_id=lot.pk)
        with self.assertRaises(ConflictError):
            services.delete_lot(lot)
        self.assertTrue(InventoryLot.objects.filter(pk=lot.pk).exists())

    def test_delete_unused_lot(self):
        lot = TestDataFactory.create_lot(self.variant)
        services.delete_lot(lot)
        self.assertFalse(InventoryLot.objects.exists())

    def test_summary(self):
        today = timezone.localdate()
        TestDataFactory.create_lot(self.variant, expiration_date=today + timedelta(days=10))
        TestDataFactory.create_lot(self.variant, expiration_date=today - timedelta(days=1))
        TestDataFactory.create_lot(self.variant, expiration_date=today + timedelta(days=90))
        TestDataFactory.create_lot(self.variant, lot_status=0)
        summary = services.get_lots_summary(self.company.pk)
        self.assertEqual(summary, {
            'total_lots': 4,
            'active_lots': 3,
            'inactive_lots': 1,
            'expiring_soon': 1,
            'expired_lots': 1,
        })


class InventoryAPITests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.company = TestDataFactory.create_company()
        self.member = TestDataFactory.create_user()
        TestDataFactory.add_membership(self.member, self.company)
        self.client.authenticate_user(self.member).use_company(self.company)
        self.storage = TestDataFactory.create_storage(self.company)
        self.variant = TestDataFactory.create_stocked_variant(self.company)

    def test_lot_without_variant(self):
        response = self.client.post('/api/v1/inventory/lots/', {'lot_number': 'L1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])
        self.assertIn({'path': 'inv_var_id', 'msg': 'inv_var_id is required'}, response.data['errors'])

    def test_create_lot(self):
        response = self.client.post('/api/v1/inventory/lots/', {
            'inv_var_id': self.variant.pk,
            'lot_number': 'L1',
            'lot_unit_cost': '12.5',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['lot_unit_cost'], '12.500')

    def test_validate_lot_endpoint(self):
        response = self.client.post('/api/v1/inventory/lots/validate/', {'lot_number': ''}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['data']['is_valid'])

    def test_lot_summary_rejects_bad_variant(self):
        response = self.client.get('/api/v1/inventory/lots/summary/?inv_var_id=abc')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_record_and_list_movements(self):
        response = self.client.post('/api/v1/inventory/movements/', {
            'id_inv_storage': self.storage.pk,
            'inv_var_id': self.variant.pk,
            'movement_type': MOVEMENT_IN,
            'quantity': '5',
            'related_doc': 'PO-1',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data'][0]['quantity'], '5.000')
        self.assertEqual(response.data['data'][0]['user_id'], self.member.pk)

        response = self.client.get('/api/v1/inventory/movements/?related_doc=PO-1')
        self.assertEqual(response.data['pagination']['total'], 1)

        response = self.client.get(f'/api/v1/inventory/variant-storages/?inv_var_id={self.variant.pk}')
        self.assertEqual(response.data['data'][0]['inv_vs_stock'], '5.000')

    def test_balance_overflow_response(self):
        payload = {
            'id_inv_storage': self.storage.pk,
            'inv_var_id': self.variant.pk,
            'movement_type': MOVEMENT_IN,
            'quantity': '9999999.999',
        }
        response = self.client.post('/api/v1/inventory/movements/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.post('/api/v1/inventory/movements/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['errors'][0]['path'], 'inv_vs_stock')

        response = self.client.get('/api/v1/inventory/variant-storages/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data'][0]['inv_vs_stock'], '9999999.999')

    def test_variant_stock_summary_endpoint(self):
        other = TestDataFactory.create_storage(self.company)
        services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_IN, '5', self.member)
        services.record_movement(other.pk, self.variant.pk, MOVEMENT_IN, '2', self.member)
        response = self.client.get(f'/api/v1/inventory/variant-storages/summary/?inv_var_id={self.variant.pk}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['inv_var_id'], self.variant.pk)
        self.assertEqual(response.data['data']['total_stock'], Decimal('7.000'))
        self.assertEqual(response.data['data']['storage_locations'], 2)

        response = self.client.get(
            f'/api/v1/inventory/variant-storages/summary/?inv_var_id={self.variant.pk}&id_inv_storage={other.pk}'
        )
        self.assertEqual(response.data['data']['total_stock'], Decimal('2.000'))

    def test_variant_stock_summary_requires_variant(self):
        response = self.client.get('/api/v1/inventory/variant-storages/summary/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn({'path': 'inv_var_id', 'msg': 'inv_var_id is required'}, response.data['errors'])

    def test_variant_stock_summary_of_other_company(self):
        foreign = TestDataFactory.create_stocked_variant(TestDataFactory.create_company())
        response = self.client.get(f'/api/v1/inventory/variant-storages/summary/?inv_var_id={foreign.pk}')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_lot_stock_summary_endpoint(self):
        variant = TestDataFactory.create_stocked_variant(self.company, lot_managed=True)
        lot = TestDataFactory.create_lot(variant)
        services.record_movement(self.storage.pk, variant.pk, MOVEMENT_IN, '3', self.member, lot_id=lot.pk)
        response = self.client.get(f'/api/v1/inventory/lot-storages/summary/?inv_lot_id={lot.pk}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['inv_lot_id'], lot.pk)
        self.assertEqual(response.data['data']['total_stock'], Decimal('3.000'))
        self.assertEqual(response.data['data']['storage_locations'], 1)

        response = self.client.get('/api/v1/inventory/lot-storages/summary/?inv_lot_id=abc')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_insufficient_stock_response(self):
        response = self.client.post('/api/v1/inventory/movements/', {
            'id_inv_storage': self.storage.pk,
            'inv_var_id': self.variant.pk,
            'movement_type': MOVEMENT_OUT,
            'quantity': '1',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Insufficient stock', response.data['message'])

    def test_allow_negative_requires_company_admin(self):
        payload = {
            'id_inv_storage': self.storage.pk,
            'inv_var_id': self.variant.pk,
            'movement_type': MOVEMENT_OUT,
            'quantity': '1',
            'allow_negative': True,
        }
        response = self.client.post('/api/v1/inventory/movements/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        manager = TestDataFactory.create_user()
        TestDataFactory.add_membership(manager, self.company, is_admin=True)
        self.client.authenticate_user(manager)
        response = self.client.post('/api/v1/inventory/movements/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_transfer_and_reverse_endpoints(self):
        destination = TestDataFactory.create_storage(self.company)
        services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_IN, '5', self.member)
        response = self.client.post('/api/v1/inventory/movements/transfer/', {
            'source_storage_id': self.storage.pk,
            'destination_storage_id': destination.pk,
            'inv_var_id': self.variant.pk,
            'quantity': '2',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        leg_id = response.data['data'][0]['id']

        response = self.client.post(f'/api/v1/inventory/movements/{leg_id}/reverse/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.post(f'/api/v1/inventory/movements/{leg_id}/reverse/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Movement has already been reversed')

    def test_statistics_endpoint(self):
        services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_IN, '5', self.member)
        response = self.client.get('/api/v1/inventory/movements/statistics/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['total_movements'], 1)

    def test_statistics_rejects_bad_date(self):
        response = self.client.get('/api/v1/inventory/movements/statistics/?date_from=yesterday')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_storage_writes_need_company_admin(self):
        response = self.client.post('/api/v1/inventory/storages/', {
            'inv_storage_code': 'NEW',
            'inv_storage_name': 'New',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_minimum_stock_is_the_only_writable_balance_field(self):
        services.record_movement(self.storage.pk, self.variant.pk, MOVEMENT_IN, '5', self.member)
        balance = InventoryVariantStorage.objects.get(variant=self.variant, storage=self.storage)
        manager = TestDataFactory.create_user()
        TestDataFactory.add_membership(manager, self.company, is_admin=True)
        self.client.authenticate_user(manager)
        response = self.client.patch(f'/api/v1/inventory/variant-storages/{balance.pk}/', {
            'inv_vs_stock': '999',
            'inv_vs_stock_min': '2',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        balance.refresh_from_db()
        self.assertEqual(balance.inv_vs_stock, Decimal('5.000'))
        self.assertEqual(balance.inv_vs_stock_min, Decimal('2.000'))
