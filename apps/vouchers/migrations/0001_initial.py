from django.conf import settings
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('outlets', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Voucher',
            fields=[
                ('id', models.CharField(editable=False, max_length=11, primary_key=True, serialize=False)),
                ('recipient_name', models.CharField(max_length=200)),
                ('recipient_mobile', models.CharField(db_index=True, max_length=20)),
                ('voucher_type', models.CharField(choices=[('Partner', 'Partner'), ('Family & Friends', 'Family & Friends')], default='Partner', max_length=20)),
                ('discount_percentage', models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(100)])),
                ('bill_no', models.CharField(max_length=50)),
                ('issue_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('expiry_date', models.DateTimeField()),
                ('status', models.CharField(choices=[('Issued', 'Issued'), ('Redeemed', 'Redeemed'), ('Expired', 'Expired')], default='Issued', max_length=10)),
                ('redeemed_date', models.DateTimeField(blank=True, null=True)),
                ('redemption_bill_no', models.CharField(blank=True, max_length=50)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('issued_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='vouchers_issued', to=settings.AUTH_USER_MODEL)),
                ('outlet', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='vouchers', to='outlets.outlet')),
                ('redeemed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='vouchers_redeemed', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'vouchers',
                'ordering': ['-issue_date'],
                'indexes': [
                    models.Index(fields=['status', 'expiry_date'], name='vouchers_status_expiry_idx'),
                    models.Index(fields=['outlet', 'issue_date'], name='vouchers_outlet_issued_idx'),
                    models.Index(fields=['redeemed_date'], name='vouchers_redeemed_idx'),
                ],
            },
        ),
    ]
