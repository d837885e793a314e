"""
Test suite for types of prices and price snapshots
"""
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.test import TestCase
from rest_framework import status

from erp.core.exceptions import ConfigurationError, ConflictError, NotFoundError, ValidationError
from erp.core.test_utils import AuthenticatedAPIClient, TestDataFactory
from erp.currencies.models import EXCHANGE_TYPE_LOCAL, EXCHANGE_TYPE_STABLE, METHOD_DIVIDE, METHOD_MULTIPLY
from .models import InventoryPriceHistory
from . import services


class PricingTestMixin:
    def setup_pricing(self):
        self.company = TestDataFactory.create_company()
        self.user = TestDataFactory.create_user()
        self.ves = TestDataFactory.create_currency('VES')
        self.usd = TestDataFactory.create_currency('USD')
        TestDataFactory.create_exchange(self.company, self.ves, exchange_type=EXCHANGE_TYPE_LOCAL)
        TestDataFactory.create_exchange(self.company, self.usd, exchange_type=EXCHANGE_TYPE_STABLE,
                                        rate=Decimal('40'), method=METHOD_DIVIDE)
        self.variant = TestDataFactory.create_stocked_variant(self.company)
        self.retail = TestDataFactory.create_type_of_price(self.company, name='Retail')


class SnapshotServiceTests(PricingTestMixin, TestCase):
    def setUp(self):
        self.setup_pricing()

    def test_snapshot_amounts(self):
        snapshot = services.snapshot_price(self.variant.pk, self.retail.pk, '100', '16', '60', self.user)
        self.assertTrue(snapshot.is_current)
        self.assertEqual(snapshot.price_local, Decimal('116.000'))
        self.assertEqual(snapshot.profit_local, Decimal('40.000'))
        self.assertEqual(snapshot.cost_avg_local, Decimal('60.000'))
        self.assertEqual(snapshot.price_stable, Decimal('2.900'))
        self.assertEqual(snapshot.price_base_stable, Decimal('2.500'))
        self.assertEqual(snapshot.cost_stable, Decimal('1.500'))
        self.assertEqual(snapshot.profit_stable, Decimal('1.000'))
        self.assertEqual(snapshot.currency_local_id, self.ves.pk)
        self.assertEqual(snapshot.currency_stable_id, self.usd.pk)
        self.assertIsNone(snapshot.price_ref)
        self.assertIsNone(snapshot.currency_ref_id)

    def test_single_current_row_per_variant_and_type(self):
        first = services.snapshot_price(self.variant.pk, self.retail.pk, '100', '0', '50', self.user)
        second = services.snapshot_price(self.variant.pk, self.retail.pk, '110', '0', '50', self.user)
        first.refresh_from_db()
        self.assertFalse(first.is_current)
        self.assertTrue(second.is_current)
        self.assertEqual(
            InventoryPriceHistory.objects.filter(variant=self.variant, typeprice=self.retail, is_current=True).count(),
            1,
        )

    def test_types_are_independent(self):
        wholesale = TestDataFactory.create_type_of_price(self.company, name='Wholesale')
        services.snapshot_price(self.variant.pk, self.retail.pk, '100', '0', '50', self.user)
        services.snapshot_price(self.variant.pk, wholesale.pk, '90', '0', '50', self.user)
        self.assertEqual(services.get_current_prices(self.variant.pk).count(), 2)

    def test_set_current_restores_older_snapshot(self):
        first = services.snapshot_price(self.variant.pk, self.retail.pk, '100', '0', '50', self.user)
        second = services.snapshot_price(self.variant.pk, self.retail.pk, '110', '0', '50', self.user)
        restored = services.set_current(first.pk)
        second.refresh_from_db()
        self.assertTrue(restored.is_current)
        self.assertFalse(second.is_current)

    def test_set_current_is_idempotent(self):
        snapshot = services.snapshot_price(self.variant.pk, self.retail.pk, '100', '0', '50', self.user)
        self.assertTrue(services.set_current(snapshot.pk).is_current)
        self.assertEqual(InventoryPriceHistory.objects.filter(is_current=True).count(), 1)

    def test_database_rejects_second_current_row(self):
        services.snapshot_price(self.variant.pk, self.retail.pk, '100', '0', '50', self.user)
        with self.assertRaises(IntegrityError), transaction.atomic():
            InventoryPriceHistory.objects.create(
                variant=self.variant, typeprice=self.retail, is_current=True, currency_local=self.ves,
                price_local=1, price_base_local=1, tax_amount_local=0, cost_local=0, cost_avg_local=0,
                profit_local=1,
            )

    def test_missing_local_rate(self):
        company = TestDataFactory.create_company()
        variant = TestDataFactory.create_stocked_variant(company)
        typeprice = TestDataFactory.create_type_of_price(company)
        with self.assertRaises(ConfigurationError):
            services.snapshot_price(variant.pk, typeprice.pk, '100', '0', '50', self.user)
        self.assertFalse(InventoryPriceHistory.objects.exists())

    def test_negative_amounts_rejected(self):
        with self.assertRaises(ValidationError):
            services.snapshot_price(self.variant.pk, self.retail.pk, '-1', '0', '0', self.user)

    def test_converted_amount_overflow_writes_nothing(self):
        self.company.currency_exchanges.filter(currency_exc_type=EXCHANGE_TYPE_STABLE).update(
            currency_exc_rate=Decimal('1000'), exchange_method=METHOD_MULTIPLY,
        )
        with self.assertRaises(ValidationError) as ctx:
            services.snapshot_price(self.variant.pk, self.retail.pk, '100000000000000', '0', '0', self.user)
        self.assertEqual(ctx.exception.errors[0]['path'], 'price_stable')
        self.assertFalse(InventoryPriceHistory.objects.exists())

    def test_local_total_overflow(self):
        with self.assertRaises(ValidationError) as ctx:
            services.snapshot_price(self.variant.pk, self.retail.pk, '999999999999999.999', '1', '0', self.user)
        self.assertEqual(ctx.exception.errors[0]['path'], 'price_local')

    def test_cost_above_price_gives_negative_profit(self):
        snapshot = services.snapshot_price(self.variant.pk, self.retail.pk, '50', '0', '80', self.user)
        self.assertEqual(snapshot.profit_local, Decimal('-30.000'))

    def test_inactive_type_rejected(self):
        self.retail.typeprice_status = 0
        self.retail.save()
        with self.assertRaises(ValidationError):
            services.snapshot_price(self.variant.pk, self.retail.pk, '100', '0', '50', self.user)

    def test_type_of_other_company_not_found(self):
        foreign = TestDataFactory.create_type_of_price(TestDataFactory.create_company())
        with self.assertRaises(NotFoundError):
            services.snapshot_price(self.variant.pk, foreign.pk, '100', '0', '50', self.user)

    def test_duplicate_type_name(self):
        with self.assertRaises(ConflictError):
            services.create_type_of_price(self.company.pk, {'typeprice_name': 'retail'})


class PricingAPITests(PricingTestMixin, TestCase):
    def setUp(self):
        self.setup_pricing()
        self.client = AuthenticatedAPIClient()
        TestDataFactory.add_membership(self.user, self.company)
        self.client.authenticate_user(self.user).use_company(self.company)

    def test_create_and_read_current(self):
        response = self.client.post('/api/v1/inventory/prices/', {
            'inv_var_id': self.variant.pk,
            'typeprice_id': self.retail.pk,
            'price_base_local': '100',
            'tax_amount_local': '16',
            'cost_local': '60',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['price_local'], '116.000')
        self.assertEqual(response.data['data']['price_stable'], '2.900')

        response = self.client.get(f'/api/v1/inventory/prices/variant/{self.variant.pk}/current/')
        self.assertEqual(len(response.data['data']), 1)
        self.assertEqual(response.data['data'][0]['typeprice_name'], 'Retail')

    def test_price_base_required(self):
        response = self.client.post('/api/v1/inventory/prices/', {
            'inv_var_id': self.variant.pk,
            'typeprice_id': self.retail.pk,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn({'path': 'price_base_local', 'msg': 'price_base_local is required'}, response.data['errors'])

    def test_history_and_set_current(self):
        first = services.snapshot_price(self.variant.pk, self.retail.pk, '100', '0', '50', self.user)
        services.snapshot_price(self.variant.pk, self.retail.pk, '120', '0', '50', self.user)

        response = self.client.get(f'/api/v1/inventory/prices/variant/{self.variant.pk}/?typeprice_id={self.retail.pk}')
        self.assertEqual(response.data['pagination']['total'], 2)

        response = self.client.patch(f'/api/v1/inventory/prices/{first.pk}/set-current/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['data']['is_current'])

    def test_types_of_prices_require_admin_to_write(self):
        response = self.client.post('/api/v1/types-of-prices/', {'typeprice_name': 'Promo'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.get('/api/v1/types-of-prices/')
        self.assertEqual(response.data['pagination']['total'], 1)

    def test_overflow_is_400_and_current_price_kept(self):
        current = services.snapshot_price(self.variant.pk, self.retail.pk, '100', '0', '50', self.user)
        response = self.client.post('/api/v1/inventory/prices/', {
            'inv_var_id': self.variant.pk,
            'typeprice_id': self.retail.pk,
            'price_base_local': '999999999999999.000',
            'tax_amount_local': '1',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['errors'][0]['path'], 'price_local')
        current.refresh_from_db()
        self.assertTrue(current.is_current)

    def test_missing_local_rate_is_400(self):
        self.company.currency_exchanges.filter(currency_exc_type=EXCHANGE_TYPE_LOCAL).update(currency_exc_status=0)
        response = self.client.post('/api/v1/inventory/prices/', {
            'inv_var_id': self.variant.pk,
            'typeprice_id': self.retail.pk,
            'price_base_local': '100',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])
