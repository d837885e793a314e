"""
Test suite for users, authentication, tenancy resolution and shared helpers
"""
import re
from decimal import Decimal

from django.core import mail
from django.db import DataError
from django.test import RequestFactory, TestCase
from rest_framework import status

from erp.companies.models import UsersCompanies
from erp.core.decimal_utils import check_digits, round_amount, round_rate, to_decimal
from erp.core.exceptions import (
    ImmutableRecordError, NotFoundError, PermissionDeniedError, ValidationError, api_exception_handler,
    flatten_errors,
)
from erp.core.models import User, UsersAudit
from erp.core.services import replace_associations
from erp.core.test_utils import AuthenticatedAPIClient, TestDataFactory
from erp.core.utils import get_company_id, is_company_admin


class DecimalUtilsTests(TestCase):
    """Fixed-point parsing and rounding"""

    def test_round_amount_half_up(self):
        self.assertEqual(round_amount('1.0005'), Decimal('1.001'))
        self.assertEqual(round_amount('2.0004'), Decimal('2.000'))

    def test_round_rate_keeps_eight_places(self):
        self.assertEqual(round_rate('100.123456789'), Decimal('100.12345679'))

    def test_float_input_uses_printed_digits(self):
        self.assertEqual(to_decimal(0.1), Decimal('0.1'))

    def test_invalid_decimal_raises_validation_error(self):
        with self.assertRaises(ValidationError) as ctx:
            to_decimal('abc', 'price')
        self.assertEqual(ctx.exception.errors[0]['path'], 'price')

    def test_non_finite_rejected(self):
        with self.assertRaises(ValidationError):
            to_decimal('NaN')

    def test_check_digits_bounds_integer_part(self):
        self.assertEqual(check_digits(Decimal('9999999.999'), 'stock', 10, 3), Decimal('9999999.999'))
        self.assertEqual(check_digits(Decimal('-9999999.999'), 'stock', 10, 3), Decimal('-9999999.999'))
        with self.assertRaises(ValidationError) as ctx:
            check_digits(Decimal('10000000'), 'stock', 10, 3)
        self.assertEqual(ctx.exception.errors,
                         [{'path': 'stock', 'msg': 'stock exceeds the maximum of 7 integer digits'}])

    def test_check_digits_defaults_to_amount_columns(self):
        check_digits(Decimal('999999999999999.999'), 'price')
        with self.assertRaises(ValidationError):
            check_digits(Decimal('1000000000000000'), 'price')


class ErrorFlatteningTests(TestCase):
    def test_nested_errors_become_paths(self):
        errors = flatten_errors({'name': ['name is required'], 'items': [{'qty': ['bad']}]})
        self.assertIn({'path': 'name', 'msg': 'name is required'}, errors)
        self.assertIn({'path': 'items.0.qty', 'msg': 'bad'}, errors)

    def test_data_error_becomes_validation_response(self):
        response = api_exception_handler(DataError('numeric field overflow'), {'view': None})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['message'], 'Value out of range for the stored field')


class AppendOnlyModelTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.entry = UsersAudit.objects.create(user=self.user, action_type=UsersAudit.ACTION_CREATE)

    def test_update_refused(self):
        self.entry.action_type = UsersAudit.ACTION_UPDATE
        with self.assertRaises(ImmutableRecordError):
            self.entry.save()

    def test_delete_refused(self):
        with self.assertRaises(ImmutableRecordError):
            self.entry.delete()
        self.assertTrue(UsersAudit.objects.filter(pk=self.entry.pk).exists())


class ReplaceAssociationsTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.c1 = TestDataFactory.create_company()
        self.c2 = TestDataFactory.create_company()
        self.c3 = TestDataFactory.create_company()

    def test_adds_removes_and_keeps(self):
        TestDataFactory.add_membership(self.user, self.c1)
        TestDataFactory.add_membership(self.user, self.c2)
        result = replace_associations(UsersCompanies, 'user', self.user, 'company', [self.c2.pk, self.c3.pk])
        self.assertEqual(result, {'added': [self.c3.pk], 'removed': [self.c1.pk], 'kept': [self.c2.pk]})
        self.assertEqual(
            set(UsersCompanies.objects.filter(user=self.user).values_list('company_id', flat=True)),
            {self.c2.pk, self.c3.pk},
        )

    def test_idempotent(self):
        replace_associations(UsersCompanies, 'user', self.user, 'company', [self.c1.pk])
        result = replace_associations(UsersCompanies, 'user', self.user, 'company', [self.c1.pk])
        self.assertEqual(result, {'added': [], 'removed': [], 'kept': [self.c1.pk]})

    def test_keep_unlisted_when_remove_missing_false(self):
        TestDataFactory.add_membership(self.user, self.c1)
        result = replace_associations(UsersCompanies, 'user', self.user, 'company', [self.c2.pk],
                                      remove_missing=False)
        self.assertEqual(result['removed'], [])
        self.assertEqual(UsersCompanies.objects.filter(user=self.user).count(), 2)


class CompanyResolutionTests(TestCase):
    """Acting company resolved from the X-Company-Id header"""

    def setUp(self):
        self.factory = RequestFactory()
        self.company = TestDataFactory.create_company()
        self.other = TestDataFactory.create_company()
        self.user = TestDataFactory.create_user()
        TestDataFactory.add_membership(self.user, self.company)

    def _request(self, user, header=None):
        extra = {'HTTP_X_COMPANY_ID': str(header)} if header is not None else {}
        request = self.factory.get('/', **extra)
        request.user = user
        return request

    def test_single_company_member_may_omit_header(self):
        self.assertEqual(get_company_id(self._request(self.user)), self.company.pk)

    def test_header_required_with_several_companies(self):
        TestDataFactory.add_membership(self.user, self.other)
        with self.assertRaises(ValidationError):
            get_company_id(self._request(self.user))

    def test_foreign_company_refused(self):
        with self.assertRaises(PermissionDeniedError):
            get_company_id(self._request(self.user, self.other.pk))

    def test_global_admin_must_send_header(self):
        admin = TestDataFactory.create_user(is_admin=True)
        with self.assertRaises(ValidationError):
            get_company_id(self._request(admin))
        self.assertEqual(get_company_id(self._request(admin, self.other.pk)), self.other.pk)

    def test_global_admin_unknown_company(self):
        admin = TestDataFactory.create_user(is_admin=True)
        with self.assertRaises(NotFoundError):
            get_company_id(self._request(admin, 999999))

    def test_company_admin_flag(self):
        self.assertFalse(is_company_admin(self.user, self.company.pk))
        UsersCompanies.objects.filter(user=self.user).update(is_admin=True)
        self.assertTrue(is_company_admin(self.user, self.company.pk))


class AuthAPITests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.password = 'Secret123'
        self.user = TestDataFactory.create_user(username='jdoe', email='jdoe@test.com', password=self.password)
        self.company = TestDataFactory.create_company(name='TestCo', fiscal_id='123456789')
        TestDataFactory.add_membership(self.user, self.company, is_admin=True)

    def test_login_returns_tokens_and_companies(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'jdoe', 'password': self.password},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data['data']
        self.assertTrue(response.data['success'])
        self.assertIn('access', data)
        self.assertIn('refresh', data)
        self.assertEqual(data['user']['companies'][0]['company_name'], 'TestCo')
        self.user.refresh_from_db()
        self.assertIsNotNone(self.user.last_login_ip)

    def test_login_wrong_password(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'jdoe', 'password': 'nope'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data['success'])

    def test_login_inactive_user_rejected(self):
        self.user.is_active = False
        self.user.save()
        response = self.client.post('/api/v1/auth/login/', {'username': 'jdoe', 'password': self.password},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_login_missing_field(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'jdoe'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn({'path': 'password', 'msg': 'password is required'}, response.data['errors'])

    def test_refresh(self):
        login = self.client.post('/api/v1/auth/login/', {'username': 'jdoe', 'password': self.password},
                                 format='json')
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': login.data['data']['refresh']},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data['data'])

    def test_me_requires_authentication(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data['success'])

    def test_me(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['username'], 'jdoe')
        self.assertTrue(response.data['data']['companies'][0]['is_admin'])


class PasswordResetAPITests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user(email='reset@test.com')

    def _reset_link_params(self):
        body = mail.outbox[-1].body
        uid = re.search(r'uid=([^&\s]+)', body).group(1)
        token = re.search(r'token=([^&\s]+)', body).group(1)
        return uid, token

    def test_full_reset_flow_and_token_single_use(self):
        response = self.client.post('/api/v1/auth/request-password-reset/', {'email': 'reset@test.com'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(mail.outbox), 1)
        uid, token = self._reset_link_params()

        payload = {'uid': uid, 'token': token, 'new_password': 'BrandNew123'}
        response = self.client.post('/api/v1/auth/reset-password/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('BrandNew123'))

        response = self.client.post('/api/v1/auth/reset-password/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Invalid or expired token')

    def test_unknown_email(self):
        response = self.client.post('/api/v1/auth/request-password-reset/', {'email': 'nobody@test.com'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(len(mail.outbox), 0)

    def test_inactive_user(self):
        self.user.is_active = False
        self.user.save()
        response = self.client.post('/api/v1/auth/request-password-reset/', {'email': 'reset@test.com'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_weak_password_rejected(self):
        self.client.post('/api/v1/auth/request-password-reset/', {'email': 'reset@test.com'}, format='json')
        uid, token = self._reset_link_params()
        response = self.client.post('/api/v1/auth/reset-password/',
                                    {'uid': uid, 'token': token, 'new_password': 'alllowercase'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Password does not meet requirements')


class UserAPITests(TestCase):
    """User administration endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.admin = TestDataFactory.create_user(is_admin=True)
        self.client.authenticate_user(self.admin)

    def _create(self, **overrides):
        payload = {
            'username': 'newuser',
            'email': 'newuser@test.com',
            'password': 'Password123',
            'first_name': 'New',
        }
        payload.update(overrides)
        return self.client.post('/api/v1/users/', payload, format='json')

    def test_create_user_writes_audit(self):
        response = self._create()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        user = User.objects.get(username='newuser')
        audit = UsersAudit.objects.get(user=user)
        self.assertEqual(audit.action_type, UsersAudit.ACTION_CREATE)
        self.assertEqual(audit.changed_by, self.admin)
        self.assertEqual(audit.changes_data['after']['email'], 'newuser@test.com')

    def test_duplicate_username_conflict(self):
        self._create()
        response = self._create(email='other@test.com')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Username already exists')

    def test_duplicate_email_conflict(self):
        self._create()
        response = self._create(username='another')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Email already exists')

    def test_weak_password(self):
        response = self._create(password='short')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(User.objects.filter(username='newuser').exists())

    def test_missing_email_reports_required(self):
        response = self.client.post('/api/v1/users/', {'username': 'x', 'password': 'Password123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn({'path': 'email', 'msg': 'email is required'}, response.data['errors'])

    def test_non_admin_forbidden(self):
        regular = TestDataFactory.create_user()
        self.client.authenticate_user(regular)
        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_filters_and_paginates(self):
        TestDataFactory.create_user(is_active=False)
        for _ in range(3):
            TestDataFactory.create_user()
        response = self.client.get('/api/v1/users/', {'status': 0})
        self.assertEqual(response.data['pagination']['total'], 1)

        response = self.client.get('/api/v1/users/', {'page': 1, 'limit': 2})
        self.assertEqual(len(response.data['data']), 2)
        self.assertEqual(response.data['pagination']['total'], 5)
        self.assertEqual(response.data['pagination']['last_page'], 3)

        response = self.client.get('/api/v1/users/', {'offset': 4, 'limit': 2})
        self.assertEqual(len(response.data['data']), 1)
        self.assertEqual(response.data['pagination']['current_page'], 3)

    def test_update_email_conflict(self):
        other = TestDataFactory.create_user(email='taken@test.com')
        target = TestDataFactory.create_user()
        response = self.client.patch(f'/api/v1/users/{target.pk}/', {'email': other.email}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_records_before_and_after(self):
        target = TestDataFactory.create_user(username='before')
        response = self.client.patch(f'/api/v1/users/{target.pk}/', {'first_name': 'Changed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        audit = UsersAudit.objects.get(user=target, action_type=UsersAudit.ACTION_UPDATE)
        self.assertEqual(audit.changes_data['before']['first_name'], '')
        self.assertEqual(audit.changes_data['after']['first_name'], 'Changed')

    def test_delete_refused(self):
        target = TestDataFactory.create_user()
        response = self.client.delete(f'/api/v1/users/{target.pk}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(User.objects.filter(pk=target.pk).exists())

    def test_deactivate_twice(self):
        target = TestDataFactory.create_user()
        response = self.client.patch(f'/api/v1/users/{target.pk}/deactivate/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.patch(f'/api/v1/users/{target.pk}/deactivate/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('already inactive', response.data['message'])

    def test_activate_twice(self):
        target = TestDataFactory.create_user(is_active=False)
        self.assertEqual(self.client.patch(f'/api/v1/users/{target.pk}/activate/').status_code, status.HTTP_200_OK)
        response = self.client.patch(f'/api/v1/users/{target.pk}/activate/')
        self.assertIn('already active', response.data['message'])

    def test_admin_change_password(self):
        target = TestDataFactory.create_user()
        response = self.client.post(f'/api/v1/users/{target.pk}/change-password/',
                                    {'new_password': 'Changed123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        target.refresh_from_db()
        self.assertTrue(target.check_password('Changed123'))
        self.assertTrue(UsersAudit.objects.filter(user=target,
                                                  action_type=UsersAudit.ACTION_PASSWORD_CHANGE).exists())

    def test_audit_history_newest_first(self):
        target = TestDataFactory.create_user()
        self.client.patch(f'/api/v1/users/{target.pk}/deactivate/')
        self.client.patch(f'/api/v1/users/{target.pk}/activate/')
        response = self.client.get(f'/api/v1/users/{target.pk}/audit-history/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        actions = [row['action_type'] for row in response.data['data']]
        self.assertEqual(actions, [UsersAudit.ACTION_ACTIVATE, UsersAudit.ACTION_DEACTIVATE])

    def test_assign_companies(self):
        target = TestDataFactory.create_user()
        c1 = TestDataFactory.create_company()
        c2 = TestDataFactory.create_company()
        response = self.client.put(f'/api/v1/users/{target.pk}/companies/', {'company_ids': [c1.pk, c2.pk]},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(sorted(response.data['data']['added']), sorted([c1.pk, c2.pk]))

    def test_assign_unknown_company_writes_nothing(self):
        target = TestDataFactory.create_user()
        c1 = TestDataFactory.create_company()
        response = self.client.put(f'/api/v1/users/{target.pk}/companies/', {'company_ids': [c1.pk, 999999]},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(UsersCompanies.objects.filter(user=target).exists())


class OwnPasswordChangeAPITests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user(password='Original123')
        self.client.authenticate_user(self.user)

    def test_requires_current_password(self):
        response = self.client.post('/api/v1/users/me/change-password/',
                                    {'current_password': 'Wrong123', 'new_password': 'Another123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Current password is incorrect')

    def test_change_own_password(self):
        response = self.client.post('/api/v1/users/me/change-password/',
                                    {'current_password': 'Original123', 'new_password': 'Another123'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('Another123'))
