import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


STATUS_CHOICES = [(1, 'Active'), (0, 'Inactive')]

AMOUNT_FIELDS = [
    f'{component}_{suffix}'
    for component in ('price', 'price_base', 'tax_amount', 'cost', 'cost_avg', 'profit')
    for suffix in ('local', 'stable', 'ref')
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
            name='TypeOfPrice',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('typeprice_name', models.CharField(max_length=100)),
                ('typeprice_description', models.TextField(blank=True, default='')),
                ('typeprice_status', models.PositiveSmallIntegerField(choices=STATUS_CHOICES, default=1)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='types_of_prices', to='companies.company')),
            ],
            options={
                'db_table': 'types_of_prices',
                'unique_together': {('company', 'typeprice_name')},
            },
        ),
        migrations.CreateModel(
            name='InventoryPriceHistory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('is_current', models.BooleanField(default=False)),
                *[
                    (name, models.DecimalField(blank=True, decimal_places=3, max_digits=18, null=True))
                    for name in AMOUNT_FIELDS
                ],
                ('valid_from', models.DateTimeField(default=django.utils.timezone.now)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('variant', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='price_history', to='catalog.inventoryvariant')),
                ('typeprice', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='price_history', to='pricing.typeofprice')),
                ('currency_local', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='+', to='currencies.currency')),
                ('currency_stable', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='+', to='currencies.currency')),
                ('currency_ref', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='+', to='currencies.currency')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='price_snapshots', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'inventory_prices_history',
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['variant', 'typeprice', '-created_at'], name='inv_price_variant_type_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('is_current', True)), fields=('variant', 'typeprice'), name='inv_price_single_current'),
                ],
            },
        ),
    ]
