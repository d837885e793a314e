import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


STATUS_CHOICES = [(1, 'Active'), (0, 'Inactive')]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='CompanyGroup',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('group_name', models.CharField(max_length=150)),
                ('group_status', models.PositiveSmallIntegerField(choices=STATUS_CHOICES, default=1)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='company_groups_created', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'groups',
            },
        ),
        migrations.CreateModel(
            name='Country',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('country_name', models.CharField(max_length=100)),
                ('country_iso2', models.CharField(max_length=2, unique=True)),
                ('country_iso3', models.CharField(blank=True, default='', max_length=3)),
                ('country_phone_prefix', models.CharField(blank=True, default='', max_length=10)),
                ('country_fiscal_id_label', models.CharField(blank=True, default='', max_length=50)),
                ('country_currency_iso', models.CharField(blank=True, default='', max_length=3)),
                ('country_status', models.PositiveSmallIntegerField(choices=STATUS_CHOICES, default=1)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'countries',
                'verbose_name_plural': 'countries',
            },
        ),
        migrations.CreateModel(
            name='Company',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('company_name', models.CharField(max_length=200, unique=True)),
                ('company_id_fiscal', models.CharField(max_length=50, unique=True)),
                ('company_status', models.PositiveSmallIntegerField(choices=STATUS_CHOICES, default=1)),
                ('company_is_principal', models.BooleanField(default=False)),
                ('company_razon_social', models.CharField(blank=True, default='', max_length=255)),
                ('company_slug', models.SlugField(blank=True, default='', max_length=100)),
                ('company_email', models.EmailField(blank=True, default='', max_length=254)),
                ('company_address', models.TextField(blank=True, default='')),
                ('company_phone', models.CharField(blank=True, default='', max_length=30)),
                ('company_website', models.CharField(blank=True, default='', max_length=255)),
                ('company_color', models.CharField(blank=True, default='', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('country', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='companies', to='companies.country')),
                ('group', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='companies', to='companies.companygroup')),
            ],
            options={
                'db_table': 'companies',
                'verbose_name_plural': 'companies',
            },
        ),
        migrations.CreateModel(
            name='Sucursal',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sucursal_name', models.CharField(max_length=150)),
                ('sucursal_status', models.PositiveSmallIntegerField(choices=STATUS_CHOICES, default=1)),
                ('sucursal_id_fiscal', models.CharField(blank=True, default='', max_length=50)),
                ('sucursal_email', models.EmailField(blank=True, default='', max_length=254)),
                ('sucursal_phone', models.CharField(blank=True, default='', max_length=30)),
                ('sucursal_address', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='sucursales', to='companies.company')),
            ],
            options={
                'db_table': 'sucursales',
                'verbose_name_plural': 'sucursales',
            },
        ),
        migrations.CreateModel(
            name='UsersCompanies',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('is_admin', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='memberships', to='companies.company')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='company_memberships', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'users_companies',
                'unique_together': {('user', 'company')},
            },
        ),
        migrations.CreateModel(
            name='UsersSucursales',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('sucursal', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='memberships', to='companies.sucursal')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='sucursal_memberships', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'users_sucursales',
                'unique_together': {('user', 'sucursal')},
            },
        ),
    ]
