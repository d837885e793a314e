import logging

from django.db import transaction

from erp.core.cache_utils import REFERENCE_DATA_CACHE_TTL, cached_query, invalidate_cache_pattern
from erp.core.exceptions import ConflictError, NotFoundError
from erp.core.services import replace_associations, require_existing_ids
from .models import Company, Country, Sucursal, UsersCompanies, UsersSucursales

logger = logging.getLogger(__name__)

COUNTRIES_CACHE_PREFIX = 'countries_list'


@cached_query(cache_ttl=REFERENCE_DATA_CACHE_TTL, key_prefix=COUNTRIES_CACHE_PREFIX)
def get_countries(status=None):
    from .serializers import CountrySerializer

    queryset = Country.objects.all().order_by('country_name')
    if status is not None:
        queryset = queryset.filter(country_status=status)
    return list(CountrySerializer(queryset, many=True).data)


@cached_query(cache_ttl=REFERENCE_DATA_CACHE_TTL, key_prefix=f'{COUNTRIES_CACHE_PREFIX}_regions')
def get_regions(field):
    """Distinct non-empty continent or subcontinent names of active countries."""
    return list(
        Country.objects.filter(country_status=1)
        .exclude(**{field: ''})
        .order_by(field)
        .values_list(field, flat=True)
        .distinct()
    )


def get_countries_by_region(field, name):
    return Country.objects.filter(country_status=1, **{f'{field}__iexact': name}).order_by('country_name')


def get_country_by_iso2(iso2):
    country = Country.objects.filter(country_iso2__iexact=iso2).first()
    if country is None:
        raise NotFoundError(f'Country with ISO code {iso2} not found')
    return country


def _check_country_unique(iso2, exclude_id=None):
    queryset = Country.objects.filter(country_iso2__iexact=iso2)
    if exclude_id:
        queryset = queryset.exclude(pk=exclude_id)
    if queryset.exists():
        raise ConflictError(f'Country with ISO code {iso2} already exists')


def create_country(data):
    _check_country_unique(data['country_iso2'])
    country = Country.objects.create(**data)
    invalidate_cache_pattern(COUNTRIES_CACHE_PREFIX)
    return country


def update_country(country, data):
    if 'country_iso2' in data:
        _check_country_unique(data['country_iso2'], exclude_id=country.pk)
    for field, value in data.items():
        setattr(country, field, value)
    country.save()
    invalidate_cache_pattern(COUNTRIES_CACHE_PREFIX)
    return country


def _check_company_unique(data, exclude_id=None):
    others = Company.objects.all()
    if exclude_id:
        others = others.exclude(pk=exclude_id)
    if 'company_name' in data and others.filter(company_name__iexact=data['company_name']).exists():
        raise ConflictError('Company name already exists')
    if 'company_id_fiscal' in data and others.filter(company_id_fiscal=data['company_id_fiscal']).exists():
        raise ConflictError('Company fiscal id already exists')


@transaction.atomic
def create_company(data, user=None):
    _check_company_unique(data)
    company = Company.objects.create(**data)
    logger.info(f"Company '{company.company_name}' created by {getattr(user, 'pk', None)}")
    return company


@transaction.atomic
def update_company(company, data):
    _check_company_unique(data, exclude_id=company.pk)
    for field, value in data.items():
        setattr(company, field, value)
    company.save()
    return company


def get_user_companies(user):
    queryset = Company.objects.all()
    if not user.is_global_admin:
        queryset = queryset.filter(memberships__user=user)
    return queryset.order_by('id')


def get_sucursal(company_id, sucursal_id):
    sucursal = Sucursal.objects.filter(pk=sucursal_id, company_id=company_id).first()
    if sucursal is None:
        raise NotFoundError('Sucursal not found')
    return sucursal


@transaction.atomic
def assign_user_sucursales(user, sucursal_ids, remove_missing=True):
    """Sucursales must belong to companies the user is a member of."""
    company_ids = UsersCompanies.objects.filter(user=user).values_list('company_id', flat=True)
    sucursal_ids = require_existing_ids(
        Sucursal.objects.filter(company_id__in=company_ids), sucursal_ids, 'sucursal_ids'
    )
    return replace_associations(UsersSucursales, 'user', user, 'sucursal', sucursal_ids,
                                remove_missing=remove_missing)
