# Generated manually
import django.core.validators
import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('clients', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='OutputType',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200, unique=True)),
                ('category', models.CharField(choices=[('banner', 'Banner'), ('banner_translation', 'Banner Translation'), ('banner_revision', 'Banner Revision'), ('ai_photo', 'AI Photo'), ('video', 'Video'), ('video_translation', 'Video Translation'), ('video_revision', 'Video Revision')], max_length=30)),
                ('base_credits', models.DecimalField(decimal_places=2, max_digits=8, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('description', models.TextField(blank=True)),
                ('is_active', models.BooleanField(default=True)),
                ('sort_order', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'cb_output_types',
                'ordering': ['sort_order', 'name'],
            },
        ),
        migrations.CreateModel(
            name='CreativeBoostClient',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('is_active', models.BooleanField(default=True)),
                ('default_min_credits', models.DecimalField(decimal_places=2, default=Decimal('30'), max_digits=8)),
                ('default_max_credits', models.DecimalField(decimal_places=2, default=Decimal('50'), max_digits=8)),
                ('default_price_per_credit', models.DecimalField(decimal_places=2, default=Decimal('1500'), max_digits=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('client', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='creative_boost', to='clients.client')),
            ],
            options={
                'db_table': 'cb_clients',
            },
        ),
        migrations.CreateModel(
            name='ClientMonth',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('year', models.PositiveIntegerField()),
                ('month', models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(12)])),
                ('min_credits', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=8)),
                ('max_credits', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=8)),
                ('price_per_credit', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=10)),
                ('status', models.CharField(choices=[('active', 'Active'), ('inactive', 'Inactive')], default='active', max_length=20)),
                ('invoice_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('invoice_note', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('client', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='creative_boost_months', to='clients.client')),
                ('colleague', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='creative_boost_months', to='clients.colleague')),
                ('engagement', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='creative_boost_months', to='clients.engagement')),
                ('engagement_service', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='creative_boost_months', to='clients.engagementservice')),
            ],
            options={
                'db_table': 'cb_client_months',
                'ordering': ['-year', '-month', 'client__name'],
            },
        ),
        migrations.CreateModel(
            name='ClientMonthOutput',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('year', models.PositiveIntegerField()),
                ('month', models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(12)])),
                ('normal_count', models.PositiveIntegerField(default=0)),
                ('express_count', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('client', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='creative_boost_outputs', to='clients.client')),
                ('colleague', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='creative_boost_outputs', to='clients.colleague')),
                ('output_type', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='client_outputs', to='creative_boost.outputtype')),
            ],
            options={
                'db_table': 'cb_client_month_outputs',
                'ordering': ['output_type__sort_order', 'output_type__name'],
            },
        ),
        migrations.CreateModel(
            name='SettingsChange',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('year', models.PositiveIntegerField()),
                ('month', models.PositiveSmallIntegerField()),
                ('change_type', models.CharField(choices=[('max_credits', 'Max Credits'), ('price_per_credit', 'Price per Credit'), ('status', 'Status'), ('colleague', 'Colleague')], max_length=30)),
                ('field_name', models.CharField(max_length=100)),
                ('old_value', models.TextField(blank=True, null=True)),
                ('new_value', models.TextField(blank=True, null=True)),
                ('changed_by_name', models.CharField(blank=True, max_length=200, null=True)),
                ('changed_at', models.DateTimeField(auto_now_add=True)),
                ('changed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='creative_boost_settings_changes', to=settings.AUTH_USER_MODEL)),
                ('client', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='creative_boost_settings_changes', to='clients.client')),
                ('client_month', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='settings_changes', to='creative_boost.clientmonth')),
            ],
            options={
                'db_table': 'cb_settings_history',
                'ordering': ['-changed_at', '-id'],
            },
        ),
        migrations.AddConstraint(
            model_name='clientmonth',
            constraint=models.UniqueConstraint(fields=('client', 'year', 'month'), name='unique_cb_client_month'),
        ),
        migrations.AddConstraint(
            model_name='clientmonthoutput',
            constraint=models.UniqueConstraint(fields=('client', 'output_type', 'year', 'month'), name='unique_cb_client_output'),
        ),
        migrations.AddIndex(
            model_name='clientmonthoutput',
            index=models.Index(fields=['year', 'month'], name='cb_outputs_period_idx'),
        ),
    ]
