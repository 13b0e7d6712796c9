# Generated manually for DeliveryRequest and GeneralOrder models

import django.core.validators
import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('trips', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='GeneralOrder',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('from_country', models.CharField(max_length=100)),
                ('to_country', models.CharField(max_length=100)),
                ('description', models.TextField()),
                ('weight_kg', models.DecimalField(decimal_places=2, max_digits=6, validators=[django.core.validators.MinValueValidator(Decimal('1'))])),
                ('is_valuable', models.BooleanField(default=False)),
                ('insurance_requested', models.BooleanField(default=False)),
                ('insurance_percentage', models.PositiveSmallIntegerField(choices=[(0, '0%'), (25, '25%'), (50, '50%'), (75, '75%'), (100, '100%')], default=0)),
                ('status', models.CharField(choices=[('new', 'New'), ('approved', 'Approved'), ('rejected', 'Rejected'), ('matched', 'Matched'), ('claimed', 'Claimed'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], default='new', max_length=20)),
                ('claimed_at', models.DateTimeField(blank=True, null=True)),
                ('reviewed_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('claimed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='claimed_orders', to=settings.AUTH_USER_MODEL)),
                ('reviewed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='general_orders', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'general_orders',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['status', '-created_at'], name='gorders_status_idx'), models.Index(fields=['claimed_by'], name='gorders_claimed_idx')],
            },
        ),
        migrations.CreateModel(
            name='DeliveryRequest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('description', models.TextField()),
                ('weight_kg', models.DecimalField(decimal_places=2, max_digits=6, validators=[django.core.validators.MinValueValidator(Decimal('0.1'))])),
                ('destination_city', models.CharField(max_length=100)),
                ('receiver_details', models.TextField()),
                ('handover_location', models.CharField(blank=True, max_length=255, null=True)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('accepted', 'Accepted'), ('rejected', 'Rejected')], default='pending', max_length=20)),
                ('tracking_status', models.CharField(choices=[('waiting_approval', 'Waiting Approval'), ('item_accepted', 'Item Accepted'), ('payment_done', 'Payment Done'), ('sender_photos_uploaded', 'Sender Photos Uploaded'), ('traveler_inspection_complete', 'Traveler Inspection Complete'), ('traveler_on_the_way', 'Traveler On The Way'), ('delivered', 'Delivered'), ('completed', 'Completed')], default='waiting_approval', max_length=40)),
                ('proposed_changes', models.JSONField(blank=True, help_text='Pending sender edits: {weight_kg, description}', null=True)),
                ('traveler_inspection_photos', models.JSONField(blank=True, default=list)),
                ('sender_item_photos', models.JSONField(blank=True, default=list)),
                ('payment_status', models.CharField(choices=[('unpaid', 'Unpaid'), ('pending_review', 'Pending Review'), ('paid', 'Paid'), ('rejected', 'Rejected')], default='unpaid', max_length=20)),
                ('payment_method', models.CharField(blank=True, choices=[('zaincash', 'ZainCash'), ('qicard', 'Qi Card'), ('other', 'Other')], max_length=20, null=True)),
                ('payment_amount_iqd', models.PositiveIntegerField(blank=True, null=True)),
                ('payment_proof_url', models.URLField(blank=True, max_length=500, null=True)),
                ('payment_reference', models.CharField(blank=True, max_length=100, null=True)),
                ('payment_updated_at', models.DateTimeField(blank=True, null=True)),
                ('payment_reviewed_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('cancellation_requested_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('general_order', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='requests', to='orders.generalorder')),
                ('payment_reviewed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('sender', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='sent_requests', to=settings.AUTH_USER_MODEL)),
                ('trip', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='requests', to='trips.trip')),
            ],
            options={
                'db_table': 'requests',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['sender', '-created_at'], name='requests_sender_idx'), models.Index(fields=['trip', 'status'], name='requests_trip_status_idx'), models.Index(fields=['payment_status'], name='requests_payment_idx')],
            },
        ),
    ]
