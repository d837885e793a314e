import uuid
from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


STATUS_CHOICES = [(1, 'Active'), (0, 'Inactive')]


def balance_fields(prefix):
    return [
        (f'{prefix}_stock', models.DecimalField(decimal_places=3, default=Decimal('0.000'), max_digits=10)),
        (f'{prefix}_stock_reserved', models.DecimalField(decimal_places=3, default=Decimal('0.000'), max_digits=10)),
        (f'{prefix}_stock_committed', models.DecimalField(decimal_places=3, default=Decimal('0.000'), max_digits=10)),
        (f'{prefix}_stock_prev', models.DecimalField(decimal_places=3, default=Decimal('0.000'), max_digits=10)),
        (f'{prefix}_stock_min', models.DecimalField(decimal_places=3, default=Decimal('0.000'), max_digits=10)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('catalog', '0001_initial'),
        ('companies', '0001_initial'),
        ('currencies', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='InventoryStorage',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('inv_storage_code', models.CharField(max_length=20)),
                ('inv_storage_name', models.CharField(max_length=100)),
                ('inv_storage_description', models.TextField(blank=True, default='')),
                ('inv_storage_status', models.PositiveSmallIntegerField(choices=STATUS_CHOICES, default=1)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='storages', to='companies.company')),
                ('sucursal', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='storages', to='companies.sucursal')),
            ],
            options={
                'db_table': 'inventory_storages',
                'unique_together': {('company', 'inv_storage_code')},
            },
        ),
        migrations.CreateModel(
            name='InventoryLot',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('lot_number', models.CharField(max_length=100)),
                ('lot_origin', models.CharField(blank=True, default='', max_length=100)),
                ('lot_status', models.PositiveSmallIntegerField(choices=STATUS_CHOICES, default=1)),
                ('expiration_date', models.DateField(blank=True, null=True)),
                ('manufacture_date', models.DateField(blank=True, null=True)),
                ('lot_notes', models.TextField(blank=True, default='')),
                ('lot_unit_cost', models.DecimalField(blank=True, decimal_places=3, max_digits=18, null=True)),
                ('lot_unit_cost_ref', models.DecimalField(blank=True, decimal_places=3, max_digits=18, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='inventory_lots', to='companies.company')),
                ('variant', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='lots', to='catalog.inventoryvariant')),
                ('lot_unit_currency', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='lots', to='currencies.currency')),
                ('lot_unit_currency_ref', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='lots_ref', to='currencies.currency')),
            ],
            options={
                'db_table': 'inventory_lots',
                'unique_together': {('company', 'lot_number')},
                'indexes': [
                    models.Index(fields=['variant', 'lot_status'], name='inv_lot_variant_status_idx'),
                    models.Index(fields=['expiration_date'], name='inv_lot_expiration_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='InventoryVariantStorage',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                *balance_fields('inv_vs'),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('variant', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='storage_balances', to='catalog.inventoryvariant')),
                ('storage', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='variant_balances', to='inventory.inventorystorage')),
                ('last_user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'inventory_variants_storages',
                'unique_together': {('variant', 'storage')},
            },
        ),
        migrations.CreateModel(
            name='InventoryLotStorage',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                *balance_fields('inv_ls'),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('lot', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='storage_balances', to='inventory.inventorylot')),
                ('storage', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='lot_balances', to='inventory.inventorystorage')),
                ('variant', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='lot_storage_balances', to='catalog.inventoryvariant')),
                ('last_user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'inventory_lots_storages',
                'unique_together': {('lot', 'storage')},
            },
        ),
        migrations.CreateModel(
            name='InventoryMovement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('movement_type', models.PositiveSmallIntegerField(choices=[(1, 'In'), (2, 'Out'), (3, 'Transfer')])),
                ('quantity', models.DecimalField(decimal_places=3, max_digits=10)),
                ('movement_reason', models.CharField(blank=True, default='', max_length=255)),
                ('related_doc', models.CharField(blank=True, default='', max_length=100)),
                ('correlation_id', models.UUIDField(db_index=True, default=uuid.uuid4)),
                ('transfer_role', models.CharField(blank=True, choices=[('source', 'Source'), ('destination', 'Destination')], max_length=12, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('storage', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='movements', to='inventory.inventorystorage')),
                ('variant', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='movements', to='catalog.inventoryvariant')),
                ('lot', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='movements', to='inventory.inventorylot')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='inventory_movements', to=settings.AUTH_USER_MODEL)),
                ('reverses', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='reversal', to='inventory.inventorymovement')),
            ],
            options={
                'db_table': 'inventory_movements',
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['variant', 'storage', '-created_at'], name='inv_move_variant_storage_idx'),
                    models.Index(fields=['storage', '-created_at'], name='inv_move_storage_idx'),
                    models.Index(fields=['related_doc'], name='inv_move_related_doc_idx'),
                    models.Index(fields=['movement_type', '-created_at'], name='inv_move_type_idx'),
                ],
            },
        ),
    ]
