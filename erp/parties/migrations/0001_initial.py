import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('companies', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Customer',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('cust_code', models.CharField(max_length=20)),
                ('cust_id_fiscal', models.CharField(max_length=20)),
                ('cust_status', models.PositiveSmallIntegerField(choices=[(1, 'Active'), (0, 'Inactive')], default=1)),
                ('cust_description', models.CharField(max_length=200)),
                ('cust_address', models.CharField(blank=True, default='', max_length=200)),
                ('cust_address_complement', models.CharField(blank=True, default='', max_length=100)),
                ('cust_address_city', models.CharField(blank=True, default='', max_length=100)),
                ('cust_address_state', models.CharField(blank=True, default='', max_length=100)),
                ('cust_exempt', models.BooleanField(default=False, help_text='Exempt from taxes')),
                ('cust_email', models.EmailField(blank=True, default='', max_length=200)),
                ('cust_telephone1', models.CharField(blank=True, default='', max_length=20)),
                ('cust_telephone2', models.CharField(blank=True, default='', max_length=20)),
                ('cust_cellphone', models.CharField(blank=True, default='', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='customers', to='companies.company')),
            ],
            options={
                'db_table': 'customers',
                'unique_together': {('company', 'cust_code')},
                'indexes': [models.Index(fields=['company', 'cust_id_fiscal'], name='customers_fiscal_idx')],
            },
        ),
    ]
