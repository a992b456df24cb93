from decimal import Decimal
from django.conf import settings
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('outlets', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='PackageTemplate',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('package_value', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))])),
                ('service_value', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'package_templates',
                'ordering': ['package_value', 'name'],
            },
        ),
        migrations.CreateModel(
            name='CustomerPackage',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('customer_name', models.CharField(max_length=200)),
                ('customer_mobile', models.CharField(db_index=True, max_length=20)),
                ('template_name', models.CharField(max_length=200)),
                ('package_value', models.DecimalField(decimal_places=2, max_digits=10)),
                ('service_value', models.DecimalField(decimal_places=2, max_digits=10)),
                ('assigned_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('remaining_service_value', models.DecimalField(decimal_places=2, max_digits=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('assigned_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='packages_assigned', to=settings.AUTH_USER_MODEL)),
                ('outlet', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='customer_packages', to='outlets.outlet')),
                ('template', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='customer_packages', to='packages.packagetemplate')),
            ],
            options={
                'db_table': 'customer_packages',
                'ordering': ['-assigned_date'],
                'indexes': [
                    models.Index(fields=['outlet', 'assigned_date'], name='cust_pkg_outlet_assigned_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ServiceRecord',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('service_name', models.CharField(max_length=200)),
                ('service_value', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))])),
                ('redeemed_date', models.DateTimeField()),
                ('transaction_id', models.UUIDField(db_index=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('customer_package', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='service_records', to='packages.customerpackage')),
                ('recorded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='service_records', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'service_records',
                'ordering': ['-redeemed_date', 'created_at'],
                'indexes': [
                    models.Index(fields=['customer_package', 'transaction_id'], name='svc_rec_package_txn_idx'),
                    models.Index(fields=['redeemed_date'], name='svc_rec_redeemed_idx'),
                ],
            },
        ),
    ]
