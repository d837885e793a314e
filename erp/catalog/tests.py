"""
Test suite for taxes, families, items, variants and attributes
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status

from erp.core.exceptions import ConflictError, NotFoundError, ValidationError
from erp.core.test_utils import AuthenticatedAPIClient, TestDataFactory
from .models import Inventory, InventoryTax, InventoryVariant, InventoryVariantAttr, SucursalTax, Tax
from . import services


class CatalogHierarchyAPITests(TestCase):
    """Company -> family -> item -> variant built through the API"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user(is_admin=True))

    def test_full_hierarchy(self):
        response = self.client.post('/api/v1/companies/', {
            'company_name': 'TestCo',
            'company_id_fiscal': '123456789',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.client.use_company(response.data['data']['id'])

        response = self.client.post('/api/v1/inventory/family/', {
            'inv_family_code': '01',
            'inv_family_name': 'Shoes',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        family_id = response.data['data']['id']

        response = self.client.post('/api/v1/inventory/items/', {
            'id_inv_family': family_id,
            'inv_code': 'INV001',
            'inv_description': 'Running shoe',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        inventory_id = response.data['data']['id']

        response = self.client.post('/api/v1/inventory/variants/', {
            'inv_id': inventory_id,
            'inv_var_sku': 'VAR001',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.get('/api/v1/inventory/family/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['data']), 1)
        self.assertEqual(response.data['data'][0]['inv_family_name'], 'Shoes')
        self.assertTrue(Inventory.objects.get(pk=inventory_id).inv_has_variants)

    def test_item_in_foreign_family_not_found(self):
        company = TestDataFactory.create_company()
        foreign_family = TestDataFactory.create_family(TestDataFactory.create_company())
        self.client.use_company(company)
        response = self.client.post('/api/v1/inventory/items/', {
            'id_inv_family': foreign_family.pk,
            'inv_code': 'INV001',
            'inv_description': 'X',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_missing_family_reports_required(self):
        self.client.use_company(TestDataFactory.create_company())
        response = self.client.post('/api/v1/inventory/items/', {'inv_code': 'X', 'inv_description': 'X'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn({'path': 'id_inv_family', 'msg': 'id_inv_family is required'}, response.data['errors'])


class FamilyServiceTests(TestCase):
    def setUp(self):
        self.company = TestDataFactory.create_company()

    def test_duplicate_code_conflict(self):
        services.create_family(self.company.pk, {'inv_family_code': '01', 'inv_family_name': 'Shoes'})
        with self.assertRaises(ConflictError):
            services.create_family(self.company.pk, {'inv_family_code': '01', 'inv_family_name': 'Other'})

    def test_same_code_in_other_company(self):
        services.create_family(self.company.pk, {'inv_family_code': '01', 'inv_family_name': 'Shoes'})
        other = TestDataFactory.create_company()
        family = services.create_family(other.pk, {'inv_family_code': '01', 'inv_family_name': 'Shoes'})
        self.assertEqual(family.company_id, other.pk)

    def test_foreign_tax_rejected(self):
        foreign_tax = TestDataFactory.create_tax(TestDataFactory.create_company())
        with self.assertRaises(ValidationError):
            services.create_family(self.company.pk, {
                'inv_family_code': '01', 'inv_family_name': 'Shoes', 'tax_id': foreign_tax.pk,
            })


class InventoryServiceTests(TestCase):
    def setUp(self):
        self.company = TestDataFactory.create_company()
        self.family = TestDataFactory.create_family(self.company, code='01', is_lot_managed=True)

    def test_flags_inherited_from_family(self):
        inventory = services.create_inventory(self.company.pk, {
            'family_id': self.family.pk, 'inv_code': 'INV001', 'inv_description': 'Item',
        })
        self.assertTrue(inventory.inv_is_stockable)
        self.assertTrue(inventory.inv_is_lot_managed)

    def test_service_items_are_never_stockable(self):
        inventory = services.create_inventory(self.company.pk, {
            'family_id': self.family.pk, 'inv_code': 'SRV001', 'inv_description': 'Install',
            'inv_type': Inventory.TYPE_SERVICE,
        })
        self.assertFalse(inventory.inv_is_stockable)
        self.assertFalse(inventory.inv_is_lot_managed)

    def test_lot_managed_requires_stockable(self):
        with self.assertRaises(ValidationError):
            services.create_inventory(self.company.pk, {
                'family_id': self.family.pk, 'inv_code': 'INV001', 'inv_description': 'Item',
                'inv_is_stockable': False, 'inv_is_lot_managed': True,
            })

    def test_duplicate_code_in_family(self):
        TestDataFactory.create_inventory(self.family, code='INV001')
        with self.assertRaises(ConflictError):
            services.create_inventory(self.company.pk, {
                'family_id': self.family.pk, 'inv_code': 'INV001', 'inv_description': 'Item',
            })

    def test_unknown_tax_writes_nothing(self):
        tax = TestDataFactory.create_tax(self.company)
        with self.assertRaises(ValidationError) as ctx:
            services.create_inventory(self.company.pk, {
                'family_id': self.family.pk, 'inv_code': 'INV001', 'inv_description': 'Item',
            }, taxes=[tax.pk, 999999])
        self.assertEqual(ctx.exception.errors, [{'path': 'taxes', 'msg': 'taxes 999999 does not exist'}])
        self.assertFalse(Inventory.objects.exists())
        self.assertFalse(InventoryTax.objects.exists())

    def test_nested_variants_with_attributes(self):
        attr = TestDataFactory.create_attr(self.company, values=('Red', 'Blue'))
        red = attr.values.get(attr_value='Red').pk
        blue = attr.values.get(attr_value='Blue').pk
        inventory = services.create_inventory(self.company.pk, {
            'family_id': self.family.pk, 'inv_code': 'INV001', 'inv_description': 'Item',
        }, variants=[
            {'inv_var_sku': 'VAR001', 'attr_values': [red]},
            {'inv_var_sku': 'VAR002', 'attr_values': [blue]},
        ])
        self.assertTrue(inventory.inv_has_variants)
        self.assertEqual(InventoryVariant.objects.filter(inventory=inventory).count(), 2)
        self.assertEqual(InventoryVariantAttr.objects.filter(variant__inventory=inventory).count(), 2)

    def test_foreign_attr_value_rolls_back_item(self):
        foreign_attr = TestDataFactory.create_attr(TestDataFactory.create_company())
        foreign_value = foreign_attr.values.first()
        with self.assertRaises(ValidationError):
            services.create_inventory(self.company.pk, {
                'family_id': self.family.pk, 'inv_code': 'INV001', 'inv_description': 'Item',
            }, variants=[{'inv_var_sku': 'VAR001', 'attr_values': [foreign_value.pk]}])
        self.assertFalse(Inventory.objects.exists())

    def test_duplicate_nested_skus(self):
        with self.assertRaises(ConflictError):
            services.create_inventory(self.company.pk, {
                'family_id': self.family.pk, 'inv_code': 'INV001', 'inv_description': 'Item',
            }, variants=[{'inv_var_sku': 'VAR001'}, {'inv_var_sku': 'VAR001'}])

    def test_duplicate_sku_for_item(self):
        inventory = TestDataFactory.create_inventory(self.family)
        TestDataFactory.create_variant(inventory, sku='VAR001')
        with self.assertRaises(ConflictError):
            services.create_variant(self.company.pk, inventory.pk, {'inv_var_sku': 'VAR001'})

    def test_variant_lookup_is_company_scoped(self):
        variant = TestDataFactory.create_variant(TestDataFactory.create_inventory(self.family))
        other = TestDataFactory.create_company()
        with self.assertRaises(NotFoundError):
            services.get_variant(other.pk, variant.pk)


class TaxTests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.company = TestDataFactory.create_company()
        self.manager = TestDataFactory.create_user()
        TestDataFactory.add_membership(self.manager, self.company, is_admin=True)
        self.client.authenticate_user(self.manager).use_company(self.company)

    def test_percentage_above_100_rejected(self):
        with self.assertRaises(ValidationError):
            services.create_tax(self.company.pk, {
                'tax_code': 'IVA', 'tax_name': 'IVA', 'tax_type': Tax.TAX_TYPE_PERCENTAGE,
                'tax_value': Decimal('101'),
            })

    def test_duplicate_tax_code_conflict(self):
        TestDataFactory.create_tax(self.company, code='IVA')
        with self.assertRaises(ConflictError):
            services.create_tax(self.company.pk, {
                'tax_code': 'IVA', 'tax_name': 'IVA', 'tax_type': Tax.TAX_TYPE_PERCENTAGE,
                'tax_value': Decimal('16'),
            })

    def test_sucursal_taxes_all_or_nothing(self):
        sucursal = TestDataFactory.create_sucursal(self.company)
        tax = TestDataFactory.create_tax(self.company)
        foreign_tax = TestDataFactory.create_tax(TestDataFactory.create_company())
        response = self.client.put(f'/api/v1/sucursales/{sucursal.pk}/taxes/', {
            'ids': [tax.pk, foreign_tax.pk],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(SucursalTax.objects.exists())

        response = self.client.put(f'/api/v1/sucursales/{sucursal.pk}/taxes/', {'ids': [tax.pk]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['added'], [tax.pk])

    def test_item_taxes_endpoint(self):
        family = TestDataFactory.create_family(self.company)
        inventory = TestDataFactory.create_inventory(family)
        tax = TestDataFactory.create_tax(self.company)
        response = self.client.put(f'/api/v1/inventory/items/{inventory.pk}/taxes/', {'ids': [tax.pk]},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.get(f'/api/v1/inventory/items/{inventory.pk}/')
        self.assertEqual(response.data['data']['tax_ids'], [tax.pk])


class AttributeTests(TestCase):
    def setUp(self):
        self.company = TestDataFactory.create_company()

    def test_duplicate_values_rejected(self):
        with self.assertRaises(ConflictError):
            services.create_attr(self.company.pk, {'attr_name': 'Color'}, values=['Red', 'Red'])

    def test_duplicate_name_case_insensitive(self):
        services.create_attr(self.company.pk, {'attr_name': 'Color'})
        with self.assertRaises(ConflictError):
            services.create_attr(self.company.pk, {'attr_name': 'color'})

    def test_add_existing_value_conflict(self):
        attr = TestDataFactory.create_attr(self.company, values=('Red',))
        with self.assertRaises(ConflictError):
            services.add_attr_value(attr, 'Red')
