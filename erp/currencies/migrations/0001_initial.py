from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


STATUS_CHOICES = [(1, 'Active'), (0, 'Inactive')]
EXCHANGE_TYPE_CHOICES = [(1, 'Local'), (2, 'Stable'), (3, 'Reference')]
EXCHANGE_METHOD_CHOICES = [('DIVIDE', 'Divide'), ('MULTIPLY', 'Multiply')]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('companies', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Currency',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('currency_iso_code', models.CharField(max_length=5, unique=True)),
                ('currency_name', models.CharField(max_length=40)),
                ('currency_symbol', models.CharField(blank=True, default='', max_length=10)),
                ('currency_status', models.PositiveSmallIntegerField(choices=STATUS_CHOICES, default=1)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'currencies',
                'verbose_name_plural': 'currencies',
            },
        ),
        migrations.CreateModel(
            name='CompanyCurrency',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('conversion_factor', models.DecimalField(decimal_places=8, default=Decimal('1'), max_digits=18)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='company_currencies', to='companies.company')),
                ('currency', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='company_currencies', to='currencies.currency')),
            ],
            options={
                'db_table': 'companies_currencies',
                'unique_together': {('company', 'currency')},
            },
        ),
        migrations.CreateModel(
            name='CurrencyExchange',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('currency_exc_type', models.PositiveSmallIntegerField(choices=EXCHANGE_TYPE_CHOICES)),
                ('currency_exc_rate', models.DecimalField(decimal_places=8, max_digits=18)),
                ('exchange_method', models.CharField(choices=EXCHANGE_METHOD_CHOICES, default='MULTIPLY', max_length=10)),
                ('currency_exc_status', models.PositiveSmallIntegerField(choices=STATUS_CHOICES, default=1)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='currency_exchanges', to='companies.company')),
                ('currency', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='exchanges', to='currencies.currency')),
            ],
            options={
                'db_table': 'currencies_exchanges',
                'unique_together': {('company', 'currency', 'currency_exc_type')},
                'indexes': [
                    models.Index(fields=['company', 'currency_exc_type', 'currency_exc_status'], name='curr_exc_company_type_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='CurrencyExchangeHistory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('currency_exc_type', models.PositiveSmallIntegerField(choices=EXCHANGE_TYPE_CHOICES)),
                ('currency_exc_rate', models.DecimalField(decimal_places=8, max_digits=18)),
                ('exchange_method', models.CharField(choices=EXCHANGE_METHOD_CHOICES, max_length=10)),
                ('currency_exc_status', models.PositiveSmallIntegerField(choices=STATUS_CHOICES, default=1)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='currency_exchange_history', to='companies.company')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='currency_exchange_changes', to=settings.AUTH_USER_MODEL)),
                ('currency', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='exchange_history', to='currencies.currency')),
                ('exchange', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='history', to='currencies.currencyexchange')),
            ],
            options={
                'db_table': 'currencies_exchanges_history',
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['company', 'currency', '-created_at'], name='curr_exc_hist_lookup_idx'),
                ],
            },
        ),
    ]
