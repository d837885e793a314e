from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models


STATUS_CHOICES = [(1, 'Active'), (0, 'Inactive')]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('companies', '0001_initial'),
        ('currencies', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Tax',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('tax_code', models.CharField(max_length=20)),
                ('tax_name', models.CharField(max_length=100)),
                ('tax_description', models.TextField(blank=True, default='')),
                ('tax_status', models.PositiveSmallIntegerField(choices=STATUS_CHOICES, default=1)),
                ('tax_type', models.PositiveSmallIntegerField(choices=[(1, 'Exempt'), (2, 'Percentage'), (3, 'Fixed amount')], default=2)),
                ('tax_value', models.DecimalField(decimal_places=3, default=Decimal('0'), max_digits=18)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='taxes', to='companies.company')),
                ('currency', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='taxes', to='currencies.currency')),
            ],
            options={
                'db_table': 'taxes',
                'unique_together': {('company', 'tax_code')},
            },
        ),
        migrations.CreateModel(
            name='SucursalTax',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('sucursal', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='sucursal_taxes', to='companies.sucursal')),
                ('tax', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='sucursal_taxes', to='catalog.tax')),
            ],
            options={
                'db_table': 'sucursales_taxes',
                'unique_together': {('sucursal', 'tax')},
            },
        ),
        migrations.CreateModel(
            name='InventoryFamily',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('inv_family_code', models.CharField(max_length=20)),
                ('inv_family_name', models.CharField(max_length=100)),
                ('inv_family_status', models.PositiveSmallIntegerField(choices=STATUS_CHOICES, default=1)),
                ('inv_is_stockable', models.BooleanField(default=True)),
                ('inv_is_lot_managed', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='inventory_families', to='companies.company')),
                ('tax', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='families', to='catalog.tax')),
            ],
            options={
                'db_table': 'inventory_family',
                'verbose_name_plural': 'inventory families',
                'unique_together': {('company', 'inv_family_code')},
            },
        ),
        migrations.CreateModel(
            name='Inventory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('inv_code', models.CharField(max_length=50)),
                ('inv_description', models.CharField(max_length=255)),
                ('inv_description_detail', models.TextField(blank=True, default='')),
                ('inv_status', models.PositiveSmallIntegerField(choices=STATUS_CHOICES, default=1)),
                ('inv_type', models.PositiveSmallIntegerField(choices=[(1, 'Product'), (2, 'Service')], default=1)),
                ('inv_has_variants', models.BooleanField(default=False)),
                ('inv_is_exempt', models.BooleanField(default=False)),
                ('inv_is_stockable', models.BooleanField(default=True)),
                ('inv_is_lot_managed', models.BooleanField(default=False)),
                ('inv_url_image', models.CharField(blank=True, default='', max_length=500)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='inventories', to='companies.company')),
                ('family', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='inventories', to='catalog.inventoryfamily')),
            ],
            options={
                'db_table': 'inventory',
                'verbose_name_plural': 'inventories',
                'unique_together': {('family', 'inv_code')},
            },
        ),
        migrations.CreateModel(
            name='InventoryTax',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('inventory', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='inventory_taxes', to='catalog.inventory')),
                ('tax', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='inventory_taxes', to='catalog.tax')),
            ],
            options={
                'db_table': 'inventory_taxes',
                'unique_together': {('inventory', 'tax')},
            },
        ),
        migrations.CreateModel(
            name='InventoryVariant',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('inv_var_sku', models.CharField(max_length=100)),
                ('inv_var_description', models.CharField(blank=True, default='', max_length=255)),
                ('inv_var_status', models.PositiveSmallIntegerField(choices=STATUS_CHOICES, default=1)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('inventory', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='variants', to='catalog.inventory')),
            ],
            options={
                'db_table': 'inventory_variants',
                'unique_together': {('inventory', 'inv_var_sku')},
            },
        ),
        migrations.CreateModel(
            name='InventoryAttr',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('attr_name', models.CharField(max_length=100)),
                ('attr_description', models.CharField(blank=True, default='', max_length=255)),
                ('attr_status', models.PositiveSmallIntegerField(choices=STATUS_CHOICES, default=1)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='inventory_attrs', to='companies.company')),
            ],
            options={
                'db_table': 'inventory_attrs',
                'unique_together': {('company', 'attr_name')},
            },
        ),
        migrations.CreateModel(
            name='InventoryAttrValue',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('attr_value', models.CharField(max_length=100)),
                ('attr_value_status', models.PositiveSmallIntegerField(choices=STATUS_CHOICES, default=1)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('attr', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='values', to='catalog.inventoryattr')),
            ],
            options={
                'db_table': 'inventory_attrs_values',
                'unique_together': {('attr', 'attr_value')},
            },
        ),
        migrations.CreateModel(
            name='InventoryVariantAttr',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('attr_value', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='variant_attrs', to='catalog.inventoryattrvalue')),
                ('variant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='variant_attrs', to='catalog.inventoryvariant')),
            ],
            options={
                'db_table': 'inventory_variants_attrs',
                'unique_together': {('variant', 'attr_value')},
            },
        ),
    ]
