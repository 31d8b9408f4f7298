# Generated manually
import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Colleague',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('full_name', models.CharField(max_length=200)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('phone', models.CharField(blank=True, max_length=20, null=True)),
                ('position', models.CharField(blank=True, max_length=200)),
                ('seniority', models.CharField(choices=[('junior', 'Junior'), ('mid', 'Mid'), ('senior', 'Senior'), ('partner', 'Partner')], default='mid', max_length=20)),
                ('is_freelancer', models.BooleanField(default=False)),
                ('internal_hourly_cost', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('monthly_fixed_cost', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('capacity_hours_per_month', models.PositiveIntegerField(blank=True, null=True)),
                ('status', models.CharField(choices=[('active', 'Active'), ('on_hold', 'On Hold'), ('left', 'Left')], default='active', max_length=20)),
                ('birthday', models.DateField(blank=True, null=True)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='colleague', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'colleagues',
                'ordering': ['full_name'],
            },
        ),
        migrations.CreateModel(
            name='Client',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('brand_name', models.CharField(blank=True, max_length=200)),
                ('ico', models.CharField(blank=True, help_text='Company registration number', max_length=20)),
                ('dic', models.CharField(blank=True, help_text='VAT number', max_length=20, null=True)),
                ('website', models.CharField(blank=True, max_length=255)),
                ('country', models.CharField(blank=True, default='CZ', max_length=100)),
                ('industry', models.CharField(blank=True, max_length=100)),
                ('status', models.CharField(choices=[('lead', 'Lead'), ('active', 'Active'), ('paused', 'Paused'), ('lost', 'Lost'), ('potential', 'Potential')], default='active', max_length=20)),
                ('tier', models.CharField(choices=[('standard', 'Standard'), ('gold', 'Gold'), ('platinum', 'Platinum'), ('diamond', 'Diamond')], default='standard', max_length=20)),
                ('billing_street', models.CharField(blank=True, max_length=255, null=True)),
                ('billing_city', models.CharField(blank=True, max_length=100, null=True)),
                ('billing_zip', models.CharField(blank=True, max_length=20, null=True)),
                ('billing_country', models.CharField(blank=True, max_length=100, null=True)),
                ('billing_email', models.EmailField(blank=True, max_length=254, null=True)),
                ('acquisition_channel', models.CharField(blank=True, max_length=100)),
                ('start_date', models.DateField(blank=True, null=True)),
                ('end_date', models.DateField(blank=True, null=True)),
                ('notes', models.TextField(blank=True)),
                ('pinned_notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_clients', to=settings.AUTH_USER_MODEL)),
                ('sales_representative', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='acquired_clients', to='clients.colleague')),
            ],
            options={
                'db_table': 'clients',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='ClientContact',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('position', models.CharField(blank=True, max_length=200, null=True)),
                ('email', models.EmailField(blank=True, max_length=254, null=True)),
                ('phone', models.CharField(blank=True, max_length=20, null=True)),
                ('is_primary', models.BooleanField(default=False)),
                ('is_decision_maker', models.BooleanField(default=False)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('client', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='contacts', to='clients.client')),
            ],
            options={
                'db_table': 'client_contacts',
                'ordering': ['-is_primary', 'name'],
            },
        ),
        migrations.CreateModel(
            name='Service',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(max_length=50, unique=True)),
                ('name', models.CharField(max_length=200)),
                ('service_type', models.CharField(choices=[('core', 'Core'), ('addon', 'Add-on')], default='addon', max_length=20)),
                ('category', models.CharField(choices=[('performance', 'Performance'), ('creative', 'Creative'), ('lead_gen', 'Lead Generation'), ('analytics', 'Analytics'), ('consulting', 'Consulting')], default='performance', max_length=20)),
                ('description', models.TextField(blank=True)),
                ('external_url', models.URLField(blank=True, null=True)),
                ('base_price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('currency', models.CharField(default='CZK', max_length=3)),
                ('tier_pricing', models.JSONField(blank=True, default=list)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'services',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Engagement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('type', models.CharField(choices=[('retainer', 'Retainer'), ('one_off', 'One-off'), ('internal', 'Internal')], default='retainer', max_length=20)),
                ('billing_model', models.CharField(choices=[('fixed_fee', 'Fixed Fee'), ('spend_based', 'Spend Based'), ('hybrid', 'Hybrid')], default='fixed_fee', max_length=20)),
                ('currency', models.CharField(default='CZK', max_length=3)),
                ('monthly_fee', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('one_off_fee', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('status', models.CharField(choices=[('planned', 'Planned'), ('active', 'Active'), ('paused', 'Paused'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], default='planned', max_length=20)),
                ('start_date', models.DateField()),
                ('end_date', models.DateField(blank=True, null=True)),
                ('notice_period_months', models.PositiveIntegerField(blank=True, null=True)),
                ('platforms', models.JSONField(blank=True, default=list)),
                ('notes', models.TextField(blank=True)),
                ('offer_url', models.URLField(blank=True, null=True)),
                ('contract_url', models.URLField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('client', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='engagements', to='clients.client')),
                ('contact_person', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='engagements', to='clients.clientcontact')),
            ],
            options={
                'db_table': 'engagements',
                'ordering': ['-start_date', 'name'],
            },
        ),
        migrations.CreateModel(
            name='EngagementService',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('billing_type', models.CharField(choices=[('monthly', 'Monthly'), ('one_off', 'One-off')], default='monthly', max_length=20)),
                ('currency', models.CharField(default='CZK', max_length=3)),
                ('is_active', models.BooleanField(default=True)),
                ('notes', models.TextField(blank=True)),
                ('selected_tier', models.CharField(blank=True, choices=[('growth', 'Growth'), ('pro', 'Pro'), ('elite', 'Elite')], max_length=20, null=True)),
                ('creative_boost_min_credits', models.DecimalField(blank=True, decimal_places=2, max_digits=8, null=True)),
                ('creative_boost_max_credits', models.DecimalField(blank=True, decimal_places=2, max_digits=8, null=True)),
                ('creative_boost_price_per_credit', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('invoicing_status', models.CharField(choices=[('not_applicable', 'Not Applicable'), ('pending', 'Pending'), ('invoiced', 'Invoiced')], default='not_applicable', max_length=20)),
                ('invoiced_at', models.DateTimeField(blank=True, null=True)),
                ('invoiced_in_period', models.CharField(blank=True, max_length=7, null=True)),
                ('upsell_commission_percent', models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('engagement', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='engagement_services', to='clients.engagement')),
                ('service', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='engagement_services', to='clients.service')),
                ('upsold_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='upsold_services', to='clients.colleague')),
            ],
            options={
                'db_table': 'engagement_services',
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='EngagementAssignment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('role_on_engagement', models.CharField(blank=True, max_length=100)),
                ('cost_model', models.CharField(choices=[('hourly', 'Hourly'), ('fixed_monthly', 'Fixed Monthly'), ('percentage', 'Percentage of Revenue')], default='fixed_monthly', max_length=20)),
                ('hourly_cost', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('monthly_cost', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('percentage_of_revenue', models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ('start_date', models.DateField(blank=True, null=True)),
                ('end_date', models.DateField(blank=True, null=True)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('colleague', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='assignments', to='clients.colleague')),
                ('engagement', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='assignments', to='clients.engagement')),
                ('engagement_service', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assignments', to='clients.engagementservice')),
            ],
            options={
                'db_table': 'engagement_assignments',
            },
        ),
        migrations.CreateModel(
            name='ExtraWork',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('currency', models.CharField(default='CZK', max_length=3)),
                ('hours_worked', models.DecimalField(blank=True, decimal_places=2, max_digits=8, null=True)),
                ('hourly_rate', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('work_date', models.DateField()),
                ('billing_period', models.CharField(max_length=7)),
                ('status', models.CharField(choices=[('pending_approval', 'Pending Approval'), ('in_progress', 'In Progress'), ('ready_to_invoice', 'Ready to Invoice'), ('invoiced', 'Invoiced')], default='pending_approval', max_length=20)),
                ('approval_date', models.DateTimeField(blank=True, null=True)),
                ('invoice_number', models.CharField(blank=True, max_length=50, null=True)),
                ('invoiced_at', models.DateTimeField(blank=True, null=True)),
                ('upsell_commission_percent', models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('approved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='approved_extra_works', to=settings.AUTH_USER_MODEL)),
                ('client', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='extra_works', to='clients.client')),
                ('colleague', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='extra_works', to='clients.colleague')),
                ('engagement', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='extra_works', to='clients.engagement')),
                ('upsold_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='upsold_extra_works', to='clients.colleague')),
            ],
            options={
                'db_table': 'extra_works',
                'ordering': ['-work_date'],
            },
        ),
        migrations.CreateModel(
            name='EngagementHistoryEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('change_type', models.CharField(choices=[('created', 'Created'), ('status_change', 'Status Change'), ('field_update', 'Field Update'), ('service_added', 'Service Added'), ('service_removed', 'Service Removed'), ('service_updated', 'Service Updated'), ('colleague_assigned', 'Colleague Assigned'), ('colleague_removed', 'Colleague Removed'), ('end_date_set', 'End Date Set')], max_length=30)),
                ('field_name', models.CharField(blank=True, max_length=100, null=True)),
                ('old_value', models.TextField(blank=True, null=True)),
                ('new_value', models.TextField(blank=True, null=True)),
                ('related_entity_id', models.CharField(blank=True, max_length=100, null=True)),
                ('related_entity_name', models.CharField(blank=True, max_length=255, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('changed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='engagement_changes', to=settings.AUTH_USER_MODEL)),
                ('engagement', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='history', to='clients.engagement')),
            ],
            options={
                'db_table': 'engagement_history',
                'ordering': ['-created_at', '-id'],
            },
        ),
    ]
