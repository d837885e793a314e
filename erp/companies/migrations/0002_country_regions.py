from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('companies', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='country',
            name='continent_name',
            field=models.CharField(blank=True, db_index=True, default='', max_length=20),
        ),
        migrations.AddField(
            model_name='country',
            name='subcontinent_name',
            field=models.CharField(blank=True, db_index=True, default='', max_length=40),
        ),
    ]
