from django.conf import settings
from django.db import models

STATUS_CHOICES = [
    (1, 'Active'),
    (0, 'Inactive'),
]


class CompanyGroup(models.Model):
    """Business group owning one or more companies"""
    group_name = models.CharField(max_length=150)
    group_status = models.PositiveSmallIntegerField(choices=STATUS_CHOICES, default=1)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                   related_name='company_groups_created')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.group_name

    class Meta:
        db_table = 'groups'


class Country(models.Model):
    """Reference data: countries with fiscal and currency defaults"""
    country_name = models.CharField(max_length=100)
    country_iso2 = models.CharField(max_length=2, unique=True)
    country_iso3 = models.CharField(max_length=3, blank=True, default='')
    country_phone_prefix = models.CharField(max_length=10, blank=True, default='')
    country_fiscal_id_label = models.CharField(max_length=50, blank=True, default='')
    country_currency_iso = models.CharField(max_length=3, blank=True, default='')
    continent_name = models.CharField(max_length=20, blank=True, default='', db_index=True)
    subcontinent_name = models.CharField(max_length=40, blank=True, default='', db_index=True)
    country_status = models.PositiveSmallIntegerField(choices=STATUS_CHOICES, default=1)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.country_name

    class Meta:
        db_table = 'countries'
        verbose_name_plural = 'countries'


class Company(models.Model):
    """Tenant. Every inventory, tax and pricing row belongs to one company."""
    company_name = models.CharField(max_length=200, unique=True)
    company_id_fiscal = models.CharField(max_length=50, unique=True)
    company_status = models.PositiveSmallIntegerField(choices=STATUS_CHOICES, default=1)
    group = models.ForeignKey(CompanyGroup, on_delete=models.PROTECT, null=True, blank=True, related_name='companies')
    country = models.ForeignKey(Country, on_delete=models.PROTECT, null=True, blank=True, related_name='companies')
    company_is_principal = models.BooleanField(default=False)
    company_razon_social = models.CharField(max_length=255, blank=True, default='')
    company_slug = models.SlugField(max_length=100, blank=True, default='')
    company_email = models.EmailField(blank=True, default='')
    company_address = models.TextField(blank=True, default='')
    company_phone = models.CharField(max_length=30, blank=True, default='')
    company_website = models.CharField(max_length=255, blank=True, default='')
    company_color = models.CharField(max_length=20, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.company_name

    class Meta:
        db_table = 'companies'
        verbose_name_plural = 'companies'


class Sucursal(models.Model):
    """Company branch"""
    company = models.ForeignKey(Company, on_delete=models.PROTECT, related_name='sucursales')
    sucursal_name = models.CharField(max_length=150)
    sucursal_status = models.PositiveSmallIntegerField(choices=STATUS_CHOICES, default=1)
    sucursal_id_fiscal = models.CharField(max_length=50, blank=True, default='')
    sucursal_email = models.EmailField(blank=True, default='')
    sucursal_phone = models.CharField(max_length=30, blank=True, default='')
    sucursal_address = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.sucursal_name

    class Meta:
        db_table = 'sucursales'
        verbose_name_plural = 'sucursales'


class UsersCompanies(models.Model):
    """Company membership. ``is_admin`` grants administration of that company only."""
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='company_memberships')
    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name='memberships')
    is_admin = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'users_companies'
        unique_together = [['user', 'company']]


class UsersSucursales(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='sucursal_memberships')
    sucursal = models.ForeignKey(Sucursal, on_delete=models.CASCADE, related_name='memberships')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'users_sucursales'
        unique_together = [['user', 'sucursal']]
