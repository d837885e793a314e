"""
Test suite for customers
"""
from django.test import TestCase
from rest_framework import status

from erp.core.test_utils import AuthenticatedAPIClient, TestDataFactory
from .models import Customer


class CustomerAPITests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.company = TestDataFactory.create_company()
        self.user = TestDataFactory.create_user()
        TestDataFactory.add_membership(self.user, self.company)
        self.client.authenticate_user(self.user).use_company(self.company)

    def test_create_customer(self):
        response = self.client.post('/api/v1/customers/', {
            'cust_code': 'C001',
            'cust_id_fiscal': 'V12345678',
            'cust_description': 'Acme',
            'cust_email': 'acme@example.com',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['company_id'], self.company.pk)

    def test_duplicate_code_conflict(self):
        TestDataFactory.create_customer(self.company, code='C001')
        response = self.client.post('/api/v1/customers/', {
            'cust_code': 'C001',
            'cust_id_fiscal': 'V1',
            'cust_description': 'Other',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Customer code C001 already exists in this company')

    def test_same_code_in_other_company(self):
        TestDataFactory.create_customer(TestDataFactory.create_company(), code='C001')
        response = self.client.post('/api/v1/customers/', {
            'cust_code': 'C001',
            'cust_id_fiscal': 'V1',
            'cust_description': 'Mine',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_invalid_email(self):
        response = self.client.post('/api/v1/customers/', {
            'cust_code': 'C001',
            'cust_id_fiscal': 'V1',
            'cust_description': 'Acme',
            'cust_email': 'not-an-email',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['errors'][0]['path'], 'cust_email')

    def test_list_is_company_scoped_and_searchable(self):
        TestDataFactory.create_customer(self.company, code='C001', description='Acme')
        TestDataFactory.create_customer(self.company, code='C002', description='Globex')
        TestDataFactory.create_customer(TestDataFactory.create_company(), code='C003', description='Acme')

        response = self.client.get('/api/v1/customers/')
        self.assertEqual(response.data['pagination']['total'], 2)
        response = self.client.get('/api/v1/customers/?search=acme')
        self.assertEqual([c['cust_code'] for c in response.data['data']], ['C001'])

    def test_foreign_customer_not_found(self):
        foreign = TestDataFactory.create_customer(TestDataFactory.create_company())
        response = self.client.get(f'/api/v1/customers/{foreign.pk}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_update_and_soft_delete(self):
        customer = TestDataFactory.create_customer(self.company, code='C001')
        response = self.client.patch(f'/api/v1/customers/{customer.pk}/', {'cust_exempt': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['data']['cust_exempt'])

        response = self.client.delete(f'/api/v1/customers/{customer.pk}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        customer.refresh_from_db()
        self.assertEqual(customer.cust_status, 0)
        self.assertTrue(Customer.objects.filter(pk=customer.pk).exists())
