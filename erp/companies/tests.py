"""
Test suite for companies, countries, groups and sucursales
"""
from django.core.cache import cache
from django.test import TestCase
from rest_framework import status

from erp.companies.models import Company, Country, Sucursal, UsersSucursales
from erp.companies.services import get_countries
from erp.core.test_utils import AuthenticatedAPIClient, TestDataFactory


class CompanyAPITests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.admin = TestDataFactory.create_user(is_admin=True)
        self.client.authenticate_user(self.admin)

    def test_create_company(self):
        response = self.client.post('/api/v1/companies/', {
            'company_name': 'TestCo',
            'company_id_fiscal': '123456789',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['company_name'], 'TestCo')

    def test_duplicate_fiscal_id_conflict(self):
        TestDataFactory.create_company(name='First', fiscal_id='123456789')
        response = self.client.post('/api/v1/companies/', {
            'company_name': 'Second',
            'company_id_fiscal': '123456789',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Company fiscal id already exists')

    def test_duplicate_name_conflict_case_insensitive(self):
        TestDataFactory.create_company(name='TestCo')
        response = self.client.post('/api/v1/companies/', {
            'company_name': 'testco',
            'company_id_fiscal': '999',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_missing_name_reports_required(self):
        response = self.client.post('/api/v1/companies/', {'company_id_fiscal': '1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn({'path': 'company_name', 'msg': 'company_name is required'}, response.data['errors'])

    def test_non_admin_cannot_create(self):
        user = TestDataFactory.create_user()
        self.client.authenticate_user(user)
        response = self.client.post('/api/v1/companies/', {
            'company_name': 'Nope',
            'company_id_fiscal': '1',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_member_sees_only_own_companies(self):
        mine = TestDataFactory.create_company()
        TestDataFactory.create_company()
        user = TestDataFactory.create_user()
        TestDataFactory.add_membership(user, mine)
        self.client.authenticate_user(user)
        response = self.client.get('/api/v1/companies/')
        self.assertEqual([c['id'] for c in response.data['data']], [mine.pk])

    def test_delete_is_soft(self):
        company = TestDataFactory.create_company()
        response = self.client.delete(f'/api/v1/companies/{company.pk}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        company.refresh_from_db()
        self.assertEqual(company.company_status, 0)

    def test_non_admin_member_cannot_update(self):
        company = TestDataFactory.create_company()
        user = TestDataFactory.create_user()
        TestDataFactory.add_membership(user, company)
        self.client.authenticate_user(user)
        response = self.client.patch(f'/api/v1/companies/{company.pk}/', {'company_color': '#fff'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class CountryTests(TestCase):
    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()
        self.admin = TestDataFactory.create_user(is_admin=True)
        self.client.authenticate_user(self.admin)

    def test_country_list_cache_invalidated_on_create(self):
        Country.objects.create(country_name='Venezuela', country_iso2='VE')
        self.assertEqual(len(get_countries()), 1)
        response = self.client.post('/api/v1/countries/', {
            'country_name': 'Colombia',
            'country_iso2': 'CO',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(get_countries()), 2)

    def test_duplicate_iso2_conflict(self):
        Country.objects.create(country_name='Venezuela', country_iso2='VE')
        response = self.client.post('/api/v1/countries/', {
            'country_name': 'Other',
            'country_iso2': 'VE',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class CountryRegionTests(TestCase):
    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user())
        Country.objects.create(country_name='Venezuela', country_iso2='VE', continent_name='America',
                               subcontinent_name='South America')
        Country.objects.create(country_name='Colombia', country_iso2='CO', continent_name='America',
                               subcontinent_name='South America')
        Country.objects.create(country_name='Spain', country_iso2='ES', continent_name='Europe',
                               subcontinent_name='Southern Europe')
        Country.objects.create(country_name='Atlantis', country_iso2='AT', continent_name='Oceania',
                               country_status=0)
        Country.objects.create(country_name='Nowhere', country_iso2='NW')

    def test_continents_of_active_countries(self):
        response = self.client.get('/api/v1/countries/continents/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data'], ['America', 'Europe'])

    def test_subcontinents(self):
        response = self.client.get('/api/v1/countries/subcontinents/')
        self.assertEqual(response.data['data'], ['South America', 'Southern Europe'])

    def test_countries_by_continent(self):
        response = self.client.get('/api/v1/countries/continent/america/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['pagination']['total'], 2)
        self.assertEqual([c['country_iso2'] for c in response.data['data']], ['CO', 'VE'])

    def test_countries_by_subcontinent(self):
        response = self.client.get('/api/v1/countries/subcontinent/Southern%20Europe/')
        self.assertEqual([c['country_name'] for c in response.data['data']], ['Spain'])

    def test_country_by_iso2(self):
        response = self.client.get('/api/v1/countries/iso2/ve/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['country_name'], 'Venezuela')
        self.assertEqual(response.data['data']['continent_name'], 'America')

        response = self.client.get('/api/v1/countries/iso2/ZZ/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class SucursalAPITests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.company = TestDataFactory.create_company()
        self.manager = TestDataFactory.create_user()
        TestDataFactory.add_membership(self.manager, self.company, is_admin=True)
        self.client.authenticate_user(self.manager).use_company(self.company)

    def test_create_and_list(self):
        response = self.client.post('/api/v1/sucursales/', {'sucursal_name': 'Main'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['company_id'], self.company.pk)
        response = self.client.get('/api/v1/sucursales/')
        self.assertEqual(response.data['pagination']['total'], 1)

    def test_other_company_sucursal_not_found(self):
        other = TestDataFactory.create_sucursal(TestDataFactory.create_company())
        response = self.client.get(f'/api/v1/sucursales/{other.pk}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_plain_member_cannot_create(self):
        member = TestDataFactory.create_user()
        TestDataFactory.add_membership(member, self.company)
        self.client.authenticate_user(member)
        response = self.client.post('/api/v1/sucursales/', {'sucursal_name': 'X'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(Sucursal.objects.exists())

    def test_header_for_foreign_company_forbidden(self):
        other = TestDataFactory.create_company()
        self.client.use_company(other)
        response = self.client.get('/api/v1/sucursales/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_missing_header_with_two_companies(self):
        TestDataFactory.add_membership(self.manager, TestDataFactory.create_company())
        self.client.clear_company()
        response = self.client.get('/api/v1/sucursales/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Company ID is required')


class UserSucursalAssignmentTests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user(is_admin=True))
        self.company = TestDataFactory.create_company()
        self.user = TestDataFactory.create_user()
        TestDataFactory.add_membership(self.user, self.company)

    def test_assign_sucursales_of_member_company(self):
        sucursal = TestDataFactory.create_sucursal(self.company)
        response = self.client.put(f'/api/v1/users/{self.user.pk}/sucursales/', {'sucursal_ids': [sucursal.pk]},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(UsersSucursales.objects.filter(user=self.user, sucursal=sucursal).exists())

    def test_sucursal_of_other_company_rejected(self):
        foreign = TestDataFactory.create_sucursal(TestDataFactory.create_company())
        response = self.client.put(f'/api/v1/users/{self.user.pk}/sucursales/', {'sucursal_ids': [foreign.pk]},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(UsersSucursales.objects.exists())


class CompanyModelTests(TestCase):
    def test_str(self):
        company = TestDataFactory.create_company(name='TestCo')
        self.assertIn('TestCo', str(company))
        self.assertEqual(Company.objects.count(), 1)


class GroupAPITests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_global_admin_creates_group(self):
        admin = TestDataFactory.create_user(is_admin=True)
        self.client.authenticate_user(admin)
        response = self.client.post('/api/v1/groups/', {'group_name': 'Holding'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['created_by'], admin.pk)

    def test_member_cannot_list_groups(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get('/api/v1/groups/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
