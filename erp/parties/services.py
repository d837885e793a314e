import logging

from erp.core.exceptions import ConflictError, NotFoundError
from .models import Customer

logger = logging.getLogger(__name__)


def _check_customer_code(company_id, code, exclude_id=None):
    queryset = Customer.objects.filter(company_id=company_id, cust_code=code)
    if exclude_id:
        queryset = queryset.exclude(pk=exclude_id)
    if queryset.exists():
        raise ConflictError(f'Customer code {code} already exists in this company')


def get_customer(company_id, customer_id):
    customer = Customer.objects.filter(pk=customer_id, company_id=company_id).first()
    if customer is None:
        raise NotFoundError('Customer not found')
    return customer


def create_customer(company_id, data):
    _check_customer_code(company_id, data['cust_code'])
    customer = Customer.objects.create(company_id=company_id, **data)
    logger.info(f"Customer {customer.cust_code} created for company {company_id}")
    return customer


def update_customer(customer, data):
    if 'cust_code' in data:
        _check_customer_code(customer.company_id, data['cust_code'], exclude_id=customer.pk)
    for field, value in data.items():
        setattr(customer, field, value)
    customer.save()
    return customer
