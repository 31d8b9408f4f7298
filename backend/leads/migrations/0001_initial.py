# Generated manually
import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models

STAGE_CHOICES = [('new_lead', 'New lead'), ('meeting_done', 'Meeting done'), ('waiting_access', 'Waiting for access'), ('access_received', 'Access received'), ('preparing_offer', 'Preparing offer'), ('offer_sent', 'Offer sent'), ('won', 'Won'), ('lost', 'Lost'), ('postponed', 'Postponed')]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('clients', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Lead',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('company_name', models.CharField(max_length=200)),
                ('ico', models.CharField(blank=True, max_length=20)),
                ('dic', models.CharField(blank=True, max_length=20, null=True)),
                ('website', models.CharField(blank=True, max_length=255, null=True)),
                ('industry', models.CharField(blank=True, max_length=100, null=True)),
                ('billing_street', models.CharField(blank=True, max_length=255, null=True)),
                ('billing_city', models.CharField(blank=True, max_length=100, null=True)),
                ('billing_zip', models.CharField(blank=True, max_length=20, null=True)),
                ('billing_country', models.CharField(blank=True, max_length=100, null=True)),
                ('billing_email', models.EmailField(blank=True, max_length=254, null=True)),
                ('contact_name', models.CharField(blank=True, max_length=200)),
                ('contact_position', models.CharField(blank=True, max_length=200, null=True)),
                ('contact_email', models.EmailField(blank=True, max_length=254, null=True)),
                ('contact_phone', models.CharField(blank=True, max_length=20, null=True)),
                ('stage', models.CharField(choices=STAGE_CHOICES, default='new_lead', max_length=20)),
                ('source', models.CharField(choices=[('referral', 'Referral'), ('inbound', 'Inbound'), ('cold_outreach', 'Cold outreach'), ('event', 'Event'), ('linkedin', 'LinkedIn'), ('website', 'Website'), ('other', 'Other')], default='other', max_length=20)),
                ('source_custom', models.CharField(blank=True, max_length=200, null=True)),
                ('client_message', models.TextField(blank=True, null=True)),
                ('ad_spend_monthly', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('summary', models.TextField(blank=True)),
                ('potential_services', models.JSONField(blank=True, default=list)),
                ('offer_type', models.CharField(choices=[('retainer', 'Retainer'), ('one_off', 'One-off')], default='retainer', max_length=20)),
                ('estimated_price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('currency', models.CharField(default='CZK', max_length=3)),
                ('probability_percent', models.PositiveSmallIntegerField(default=0)),
                ('offer_url', models.URLField(blank=True, null=True)),
                ('offer_created_at', models.DateTimeField(blank=True, null=True)),
                ('offer_sent_at', models.DateTimeField(blank=True, null=True)),
                ('access_request_sent_at', models.DateTimeField(blank=True, null=True)),
                ('access_request_platforms', models.JSONField(blank=True, default=list)),
                ('access_received_at', models.DateTimeField(blank=True, null=True)),
                ('onboarding_form_sent_at', models.DateTimeField(blank=True, null=True)),
                ('onboarding_form_url', models.URLField(blank=True, null=True)),
                ('onboarding_form_completed_at', models.DateTimeField(blank=True, null=True)),
                ('contract_url', models.URLField(blank=True, null=True)),
                ('contract_created_at', models.DateTimeField(blank=True, null=True)),
                ('contract_sent_at', models.DateTimeField(blank=True, null=True)),
                ('contract_signed_at', models.DateTimeField(blank=True, null=True)),
                ('converted_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('converted_to_client', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='source_leads', to='clients.client')),
                ('converted_to_engagement', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='source_leads', to='clients.engagement')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_leads', to=settings.AUTH_USER_MODEL)),
                ('offer_sent_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='sent_offers', to=settings.AUTH_USER_MODEL)),
                ('owner', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='owned_leads', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'leads',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='LeadNote',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('text', models.TextField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('author', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='lead_notes', to=settings.AUTH_USER_MODEL)),
                ('lead', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='notes', to='leads.lead')),
            ],
            options={
                'db_table': 'lead_notes',
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='LeadHistoryEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('change_type', models.CharField(choices=[('created', 'Created'), ('stage_change', 'Stage Change'), ('field_update', 'Field Update'), ('owner_change', 'Owner Change'), ('note_added', 'Note Added'), ('converted', 'Converted')], max_length=20)),
                ('field_name', models.CharField(blank=True, max_length=100, null=True)),
                ('old_value', models.TextField(blank=True, null=True)),
                ('new_value', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('changed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='lead_changes', to=settings.AUTH_USER_MODEL)),
                ('lead', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='history', to='leads.lead')),
            ],
            options={
                'db_table': 'lead_history',
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='LeadStageTransition',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('from_stage', models.CharField(choices=STAGE_CHOICES, max_length=20)),
                ('to_stage', models.CharField(choices=STAGE_CHOICES, max_length=20)),
                ('transition_value', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('confirmed_at', models.DateTimeField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('confirmed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='confirmed_lead_transitions', to=settings.AUTH_USER_MODEL)),
                ('lead', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='stage_transitions', to='leads.lead')),
            ],
            options={
                'db_table': 'lead_stage_transitions',
                'ordering': ['-confirmed_at'],
            },
        ),
        migrations.AddIndex(
            model_name='leadstagetransition',
            index=models.Index(fields=['from_stage', 'to_stage'], name='lead_trans_stages_idx'),
        ),
    ]
