"""
Test utilities and factories for creating test data
"""
import random
import string
from decimal import Decimal

from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from erp.catalog.models import Inventory, InventoryAttr, InventoryAttrValue, InventoryFamily, InventoryVariant, Tax
from erp.companies.models import Company, Sucursal, UsersCompanies
from erp.currencies.models import METHOD_MULTIPLY, Currency, CurrencyExchange
from erp.inventory.models import InventoryLot, InventoryStorage
from erp.parties.models import Customer
from erp.pricing.models import TypeOfPrice

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='TestPass123', is_admin=False, is_superuser=False,
                    is_active=True):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            is_admin=is_admin,
            is_superuser=is_superuser,
            is_active=is_active,
        )

    @staticmethod
    def create_company(name=None, fiscal_id=None, **extra):
        """Create a test company"""
        if not name:
            name = f'Company_{TestDataFactory.random_string(6)}'
        if not fiscal_id:
            fiscal_id = f'J{random.randint(100000000, 999999999)}'
        return Company.objects.create(company_name=name, company_id_fiscal=fiscal_id, **extra)

    @staticmethod
    def add_membership(user, company, is_admin=False):
        """Attach a user to a company"""
        return UsersCompanies.objects.create(user=user, company=company, is_admin=is_admin)

    @staticmethod
    def create_sucursal(company, name=None):
        if not name:
            name = f'Sucursal_{TestDataFactory.random_string(6)}'
        return Sucursal.objects.create(company=company, sucursal_name=name)

    @staticmethod
    def create_currency(iso_code=None, name=None, symbol='$'):
        """Create a test currency"""
        if not iso_code:
            iso_code = TestDataFactory.random_string(3).upper()
        return Currency.objects.create(
            currency_iso_code=iso_code,
            currency_name=name or f'Currency {iso_code}',
            currency_symbol=symbol,
        )

    @staticmethod
    def create_exchange(company, currency, exchange_type=1, rate=None, method=METHOD_MULTIPLY, status=1):
        """Create a currency exchange configuration"""
        if rate is None:
            rate = Decimal('1')
        return CurrencyExchange.objects.create(
            company=company,
            currency=currency,
            currency_exc_type=exchange_type,
            currency_exc_rate=rate,
            exchange_method=method,
            currency_exc_status=status,
        )

    @staticmethod
    def create_tax(company, code=None, tax_type=Tax.TAX_TYPE_PERCENTAGE, value=None):
        """Create a test tax"""
        if not code:
            code = f'T{TestDataFactory.random_string(5).upper()}'
        return Tax.objects.create(
            company=company,
            tax_code=code,
            tax_name=f'Tax {code}',
            tax_type=tax_type,
            tax_value=value if value is not None else Decimal('16.000'),
        )

    @staticmethod
    def create_family(company, code=None, name=None, is_stockable=True, is_lot_managed=False, tax=None):
        """Create a test inventory family"""
        if not code:
            code = TestDataFactory.random_string(4).upper()
        return InventoryFamily.objects.create(
            company=company,
            inv_family_code=code,
            inv_family_name=name or f'Family {code}',
            inv_is_stockable=is_stockable,
            inv_is_lot_managed=is_lot_managed,
            tax=tax,
        )

    @staticmethod
    def create_inventory(family, code=None, description=None, **extra):
        """Create a test inventory item inheriting the family flags"""
        if not code:
            code = f'INV_{TestDataFactory.random_string(6).upper()}'
        extra.setdefault('inv_is_stockable', family.inv_is_stockable)
        extra.setdefault('inv_is_lot_managed', family.inv_is_lot_managed)
        return Inventory.objects.create(
            company_id=family.company_id,
            family=family,
            inv_code=code,
            inv_description=description or f'Item {code}',
            **extra,
        )

    @staticmethod
    def create_variant(inventory, sku=None, status=1):
        """Create a test inventory variant"""
        if not sku:
            sku = f'VAR_{TestDataFactory.random_string(6).upper()}'
        return InventoryVariant.objects.create(inventory=inventory, inv_var_sku=sku, inv_var_status=status)

    @staticmethod
    def create_attr(company, name=None, values=('Red', 'Blue')):
        """Create an attribute with its values"""
        if not name:
            name = f'Attr_{TestDataFactory.random_string(6)}'
        attr = InventoryAttr.objects.create(company=company, attr_name=name)
        for value in values:
            InventoryAttrValue.objects.create(attr=attr, attr_value=value)
        return attr

    @staticmethod
    def create_storage(company, code=None, name=None, status=1):
        """Create a test storage"""
        if not code:
            code = f'ST{TestDataFactory.random_string(5).upper()}'
        return InventoryStorage.objects.create(
            company=company,
            inv_storage_code=code,
            inv_storage_name=name or f'Storage {code}',
            inv_storage_status=status,
        )

    @staticmethod
    def create_lot(variant, lot_number=None, **extra):
        """Create a test lot for a variant"""
        if not lot_number:
            lot_number = f'LOT-{TestDataFactory.random_string(8).upper()}'
        return InventoryLot.objects.create(
            company_id=variant.inventory.company_id,
            variant=variant,
            lot_number=lot_number,
            **extra,
        )

    @staticmethod
    def create_type_of_price(company, name=None):
        """Create a test type of price"""
        if not name:
            name = f'Price_{TestDataFactory.random_string(6)}'
        return TypeOfPrice.objects.create(company=company, typeprice_name=name)

    @staticmethod
    def create_customer(company, code=None, description=None):
        """Create a test customer"""
        if not code:
            code = f'C{TestDataFactory.random_string(6).upper()}'
        return Customer.objects.create(
            company=company,
            cust_code=code,
            cust_id_fiscal=f'V{random.randint(10000000, 99999999)}',
            cust_description=description or f'Customer {code}',
        )

    @staticmethod
    def create_stocked_variant(company, lot_managed=False):
        """Family, item and variant ready to receive stock"""
        family = TestDataFactory.create_family(company, is_lot_managed=lot_managed)
        inventory = TestDataFactory.create_inventory(family)
        return TestDataFactory.create_variant(inventory)


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication and company helpers"""

    def _apply_headers(self):
        self.credentials(**self._auth_header, **self._company_header)

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self._auth_header = {'HTTP_AUTHORIZATION': f'Bearer {refresh.access_token}'}
        self._company_header = getattr(self, '_company_header', {})
        self._apply_headers()
        return self

    def use_company(self, company):
        """Send ``X-Company-Id`` with every subsequent request"""
        company_id = company.pk if hasattr(company, 'pk') else company
        self._auth_header = getattr(self, '_auth_header', {})
        self._company_header = {'HTTP_X_COMPANY_ID': str(company_id)}
        self._apply_headers()
        return self

    def clear_company(self):
        """Stop sending ``X-Company-Id``"""
        self._company_header = {}
        self._apply_headers()
        return self

    def logout(self):
        """Remove authentication"""
        self._auth_header = {}
        self._company_header = {}
        self.credentials()
