"""
Test suite for currencies, exchange rates and conversion
"""
from decimal import Decimal

from django.core.cache import cache
from django.test import TestCase
from rest_framework import status

from erp.core.exceptions import (
    ConfigurationError, ConflictError, DivisionByZeroError, ImmutableRecordError, NotFoundError, ValidationError,
)
from erp.core.test_utils import AuthenticatedAPIClient, TestDataFactory
from .models import (
    EXCHANGE_TYPE_LOCAL, EXCHANGE_TYPE_STABLE, METHOD_DIVIDE, METHOD_MULTIPLY, CompanyCurrency,
    CurrencyExchangeHistory,
)
from . import services


class ConvertTests(TestCase):
    def test_multiply(self):
        self.assertEqual(services.convert('10', '36.5', METHOD_MULTIPLY), Decimal('365.000'))

    def test_divide(self):
        self.assertEqual(services.convert('365', '36.5', METHOD_DIVIDE), Decimal('10.000'))

    def test_result_rounded_half_up(self):
        self.assertEqual(services.convert('1', '0.0005', METHOD_MULTIPLY), Decimal('0.001'))
        self.assertEqual(services.convert('10', '3', METHOD_DIVIDE), Decimal('3.333'))

    def test_divide_by_zero(self):
        with self.assertRaises(DivisionByZeroError):
            services.convert('10', '0', METHOD_DIVIDE)

    def test_multiply_by_zero_is_allowed(self):
        self.assertEqual(services.convert('10', '0', METHOD_MULTIPLY), Decimal('0.000'))

    def test_result_must_fit_amount_columns(self):
        self.assertEqual(services.convert('999999999999.999', '1000', METHOD_MULTIPLY),
                         Decimal('999999999999999.000'))
        with self.assertRaises(ValidationError) as ctx:
            services.convert('1000000000000', '1000', METHOD_MULTIPLY)
        self.assertEqual(ctx.exception.errors[0]['path'], 'converted_amount')
        with self.assertRaises(ValidationError):
            services.convert('999999999999999999.999', '0.00000001', METHOD_DIVIDE, field_name='price_stable')

    def test_round_trip_within_rounding(self):
        for amount in (Decimal('123.456'), Decimal('0.001'), Decimal('99999.999')):
            for rate in (Decimal('36.5'), Decimal('100.12345678'), Decimal('0.00012345')):
                there = services.convert(amount, rate, METHOD_MULTIPLY)
                back = services.convert(there, rate, METHOD_DIVIDE)
                self.assertLessEqual(abs(back - amount), Decimal('0.0005') / rate + Decimal('0.0005'))


class ExchangeServiceTests(TestCase):
    def setUp(self):
        self.company = TestDataFactory.create_company()
        self.usd = TestDataFactory.create_currency('USD')
        self.ves = TestDataFactory.create_currency('VES')
        self.admin = TestDataFactory.create_user(is_admin=True)

    def test_duplicate_triple_conflict(self):
        services.create_exchange(self.company.pk, {
            'currency_id': self.usd.pk,
            'currency_exc_type': EXCHANGE_TYPE_STABLE,
            'currency_exc_rate': Decimal('40'),
        }, user=self.admin)
        with self.assertRaises(ConflictError):
            services.create_exchange(self.company.pk, {
                'currency_id': self.usd.pk,
                'currency_exc_type': EXCHANGE_TYPE_STABLE,
                'currency_exc_rate': Decimal('41'),
            }, user=self.admin)

    def test_same_currency_different_type_allowed(self):
        TestDataFactory.create_exchange(self.company, self.usd, exchange_type=EXCHANGE_TYPE_LOCAL)
        exchange = services.create_exchange(self.company.pk, {
            'currency_id': self.usd.pk,
            'currency_exc_type': EXCHANGE_TYPE_STABLE,
            'currency_exc_rate': Decimal('1'),
        })
        self.assertEqual(exchange.currency_exc_type, EXCHANGE_TYPE_STABLE)

    def test_zero_divide_rate_rejected(self):
        with self.assertRaises(DivisionByZeroError):
            services.create_exchange(self.company.pk, {
                'currency_id': self.usd.pk,
                'currency_exc_type': EXCHANGE_TYPE_STABLE,
                'currency_exc_rate': Decimal('0'),
                'exchange_method': METHOD_DIVIDE,
            })

    def test_update_writes_history(self):
        exchange = services.create_exchange(self.company.pk, {
            'currency_id': self.usd.pk,
            'currency_exc_type': EXCHANGE_TYPE_STABLE,
            'currency_exc_rate': Decimal('40'),
        }, user=self.admin)
        services.update_exchange(exchange.pk, {'currency_exc_rate': Decimal('42.5')}, user=self.admin)

        history = list(services.get_exchange_history(self.company.pk))
        self.assertEqual(len(history), 2)
        self.assertEqual(sorted(h.currency_exc_rate for h in history), [Decimal('40'), Decimal('40')])
        exchange.refresh_from_db()
        self.assertEqual(exchange.currency_exc_rate, Decimal('42.5'))

    def test_history_is_append_only(self):
        exchange = services.create_exchange(self.company.pk, {
            'currency_id': self.usd.pk,
            'currency_exc_type': EXCHANGE_TYPE_STABLE,
            'currency_exc_rate': Decimal('40'),
        })
        row = CurrencyExchangeHistory.objects.get(exchange=exchange)
        row.currency_exc_rate = Decimal('1')
        with self.assertRaises(ImmutableRecordError):
            row.save()
        with self.assertRaises(ImmutableRecordError):
            row.delete()

    def test_exchange_rate_lookup(self):
        TestDataFactory.create_exchange(self.company, self.usd, exchange_type=EXCHANGE_TYPE_STABLE, rate=Decimal('40'))
        exchange = services.get_exchange_rate(self.company.pk, self.usd.pk, EXCHANGE_TYPE_STABLE)
        self.assertEqual(exchange.currency_exc_rate, Decimal('40'))
        with self.assertRaises(NotFoundError):
            services.get_exchange_rate(self.company.pk, self.usd.pk, EXCHANGE_TYPE_LOCAL)

    def test_company_rate_requires_configuration(self):
        with self.assertRaises(ConfigurationError):
            services.get_company_rate(self.company.pk, EXCHANGE_TYPE_LOCAL)

    def test_company_rate_ignores_inactive_rows(self):
        TestDataFactory.create_exchange(self.company, self.ves, exchange_type=EXCHANGE_TYPE_LOCAL, status=0)
        with self.assertRaises(ConfigurationError):
            services.get_company_rate(self.company.pk, EXCHANGE_TYPE_LOCAL)

    def test_convert_between_goes_through_local(self):
        TestDataFactory.create_exchange(self.company, self.ves, exchange_type=EXCHANGE_TYPE_LOCAL)
        TestDataFactory.create_exchange(self.company, self.usd, exchange_type=EXCHANGE_TYPE_STABLE,
                                        rate=Decimal('40'), method=METHOD_DIVIDE)
        result = services.convert_between(self.company.pk, self.ves.pk, self.usd.pk, '80')
        self.assertEqual(result['converted_amount'], Decimal('2.000'))

        back = services.convert_between(self.company.pk, self.usd.pk, self.ves.pk, '2')
        self.assertEqual(back['converted_amount'], Decimal('80.000'))

    def test_convert_between_same_currency(self):
        result = services.convert_between(self.company.pk, self.usd.pk, self.usd.pk, '12.3456')
        self.assertEqual(result['converted_amount'], Decimal('12.346'))
        self.assertIsNone(result['from_rate'])


class ExchangeAPITests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.company = TestDataFactory.create_company()
        self.usd = TestDataFactory.create_currency('USD')
        self.manager = TestDataFactory.create_user()
        TestDataFactory.add_membership(self.manager, self.company, is_admin=True)
        self.client.authenticate_user(self.manager).use_company(self.company)

    def test_rate_precision_preserved(self):
        response = self.client.post('/api/v1/currencies-exchanges/', {
            'currency_id': self.usd.pk,
            'currency_exc_type': EXCHANGE_TYPE_STABLE,
            'currency_exc_rate': '100.12345678',
            'exchange_method': METHOD_MULTIPLY,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.get(f"/api/v1/currencies-exchanges/{response.data['data']['id']}/")
        self.assertEqual(response.data['data']['currency_exc_rate'], '100.12345678')
        self.assertEqual(response.data['data']['exchange_method'], METHOD_MULTIPLY)

    def test_duplicate_returns_400(self):
        TestDataFactory.create_exchange(self.company, self.usd, exchange_type=EXCHANGE_TYPE_STABLE)
        response = self.client.post('/api/v1/currencies-exchanges/', {
            'currency_id': self.usd.pk,
            'currency_exc_type': EXCHANGE_TYPE_STABLE,
            'currency_exc_rate': '1',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])

    def test_plain_member_cannot_configure_rates(self):
        member = TestDataFactory.create_user()
        TestDataFactory.add_membership(member, self.company)
        self.client.authenticate_user(member)
        response = self.client.post('/api/v1/currencies-exchanges/', {
            'currency_id': self.usd.pk,
            'currency_exc_type': EXCHANGE_TYPE_STABLE,
            'currency_exc_rate': '1',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete_deactivates_and_records_history(self):
        exchange = TestDataFactory.create_exchange(self.company, self.usd, exchange_type=EXCHANGE_TYPE_STABLE)
        response = self.client.delete(f'/api/v1/currencies-exchanges/{exchange.pk}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        exchange.refresh_from_db()
        self.assertEqual(exchange.currency_exc_status, 0)
        self.assertEqual(CurrencyExchangeHistory.objects.filter(exchange=exchange).count(), 1)

    def test_convert_endpoint(self):
        TestDataFactory.create_exchange(self.company, self.usd, exchange_type=EXCHANGE_TYPE_LOCAL)
        eur = TestDataFactory.create_currency('EUR')
        TestDataFactory.create_exchange(self.company, eur, exchange_type=EXCHANGE_TYPE_STABLE, rate=Decimal('0.5'))
        response = self.client.post('/api/v1/currencies-exchanges/convert/', {
            'from_currency_id': self.usd.pk,
            'to_currency_id': eur.pk,
            'amount': '10',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['converted_amount'], '5.000')

    def test_convert_overflow_is_400(self):
        TestDataFactory.create_exchange(self.company, self.usd, exchange_type=EXCHANGE_TYPE_LOCAL)
        eur = TestDataFactory.create_currency('EUR')
        TestDataFactory.create_exchange(self.company, eur, exchange_type=EXCHANGE_TYPE_STABLE, rate=Decimal('1000'),
                                        method=METHOD_MULTIPLY)
        response = self.client.post('/api/v1/currencies-exchanges/convert/', {
            'from_currency_id': self.usd.pk,
            'to_currency_id': eur.pk,
            'amount': '999999999999999.000',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['errors'][0]['path'], 'converted_amount')

        response = self.client.post('/api/v1/currencies-exchanges/convert/', {
            'from_currency_id': self.usd.pk,
            'to_currency_id': eur.pk,
            'amount': '999999999999999999.000',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['errors'][0]['path'], 'amount')

    def test_history_filter_rejects_non_integer(self):
        response = self.client.get('/api/v1/currencies-exchanges/history/?currency_id=abc')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class CurrencyAPITests(TestCase):
    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user(is_admin=True))

    def test_duplicate_iso_code_conflict(self):
        TestDataFactory.create_currency('USD')
        response = self.client.post('/api/v1/coins/', {
            'currency_iso_code': 'usd',
            'currency_name': 'Dollar',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_company_currency_assignment_replaces_set(self):
        company = TestDataFactory.create_company()
        usd = TestDataFactory.create_currency('USD')
        eur = TestDataFactory.create_currency('EUR')
        self.client.use_company(company)
        self.client.put(f'/api/v1/companies/{company.pk}/coins/', {'currency_ids': [usd.pk]}, format='json')
        response = self.client.put(f'/api/v1/companies/{company.pk}/coins/', {'currency_ids': [eur.pk]},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            list(CompanyCurrency.objects.filter(company=company).values_list('currency_id', flat=True)),
            [eur.pk],
        )
