import decimal
import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('inventory', '0001_initial'),
        ('organizations', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Order',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('order_number', models.CharField(max_length=50)),
                ('customer_name', models.CharField(blank=True, max_length=200)),
                ('status', models.CharField(choices=[('new', 'New'), ('in_production', 'In Production'), ('on_hold', 'On Hold'), ('ready_for_shipment', 'Ready for Shipment'), ('completed', 'Completed'), ('canceled', 'Canceled')], default='new', help_text='Legacy status kept in sync with state', max_length=30)),
                ('state', models.CharField(choices=[('open', 'Open'), ('production_complete', 'Production Complete'), ('shipped', 'Shipped'), ('closed', 'Closed'), ('canceled', 'Canceled')], default='open', help_text='Canonical workflow state', max_length=30)),
                ('fulfillment_status', models.CharField(choices=[('pending', 'Pending'), ('packed', 'Packed'), ('shipped', 'Shipped'), ('delivered', 'Delivered')], default='pending', max_length=20)),
                ('shipping_method', models.CharField(choices=[('ship', 'Ship'), ('deliver', 'Deliver'), ('pickup', 'Customer Pickup')], default='ship', max_length=20)),
                ('routing_target', models.CharField(blank=True, choices=[('fulfillment', 'Fulfillment'), ('invoicing', 'Invoicing')], max_length=20, null=True)),
                ('status_pill_value', models.CharField(blank=True, help_text='Organization-defined label, independent of state', max_length=100, null=True)),
                ('priority', models.CharField(choices=[('rush', 'Rush'), ('normal', 'Normal'), ('low', 'Low')], default='normal', max_length=10)),
                ('due_date', models.DateField(blank=True, null=True)),
                ('promised_date', models.DateField(blank=True, null=True)),
                ('started_production_at', models.DateTimeField(blank=True, null=True)),
                ('production_completed_at', models.DateTimeField(blank=True, null=True)),
                ('shipped_at', models.DateTimeField(blank=True, null=True)),
                ('closed_at', models.DateTimeField(blank=True, null=True)),
                ('canceled_at', models.DateTimeField(blank=True, null=True)),
                ('cancellation_reason', models.TextField(blank=True)),
                ('bill_to_name', models.CharField(blank=True, max_length=200)),
                ('bill_to_company', models.CharField(blank=True, max_length=200)),
                ('bill_to_address1', models.CharField(blank=True, max_length=255)),
                ('bill_to_city', models.CharField(blank=True, max_length=100)),
                ('bill_to_postal_code', models.CharField(blank=True, max_length=20)),
                ('ship_to_name', models.CharField(blank=True, max_length=200)),
                ('ship_to_company', models.CharField(blank=True, max_length=200)),
                ('ship_to_address1', models.CharField(blank=True, max_length=255)),
                ('ship_to_city', models.CharField(blank=True, max_length=100)),
                ('ship_to_postal_code', models.CharField(blank=True, max_length=20)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_orders', to=settings.AUTH_USER_MODEL)),
                ('organization', models.ForeignKey(help_text='Owning organization (immutable after creation)', on_delete=django.db.models.deletion.CASCADE, related_name='orders', to='organizations.organization')),
                ('updated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='updated_orders', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['organization', 'state'], name='orders_org_state_idx'),
                    models.Index(fields=['organization', 'status'], name='orders_org_status_idx'),
                    models.Index(fields=['created_at'], name='orders_created_at_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('organization', 'order_number'), name='orders_org_order_number_uniq'),
                ],
            },
        ),
        migrations.CreateModel(
            name='OrderLineItem',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('description', models.CharField(max_length=255)),
                ('quantity', models.PositiveIntegerField(default=1)),
                ('sqft', models.DecimalField(decimal_places=2, default=decimal.Decimal('0.00'), help_text='Total printed area in square feet', max_digits=12)),
                ('total_sheets', models.PositiveIntegerField(blank=True, help_text='Sheets required, from the nesting snapshot', null=True)),
                ('requires_inventory', models.BooleanField(default=False)),
                ('status', models.CharField(choices=[('queued', 'Queued'), ('printing', 'Printing'), ('finishing', 'Finishing'), ('done', 'Done'), ('canceled', 'Canceled')], default='queued', max_length=20)),
                ('sort_order', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('material', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='line_items', to='inventory.material')),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='line_items', to='order_lifecycle.order')),
                ('organization', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='order_line_items', to='organizations.organization')),
            ],
            options={
                'ordering': ['order', 'sort_order', 'created_at'],
                'indexes': [models.Index(fields=['order', 'status'], name='line_items_order_status_idx')],
            },
        ),
        migrations.CreateModel(
            name='OrderAttachment',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('file_name', models.CharField(max_length=255)),
                ('storage_key', models.CharField(blank=True, max_length=500)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='attachments', to='order_lifecycle.order')),
                ('organization', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='order_attachments', to='organizations.organization')),
                ('uploaded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['created_at'],
            },
        ),
        migrations.CreateModel(
            name='ProductionJob',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('active', 'Active'), ('complete', 'Complete')], default='pending', max_length=20)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('line_item', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='jobs', to='order_lifecycle.orderlineitem')),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='jobs', to='order_lifecycle.order')),
                ('organization', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='production_jobs', to='organizations.organization')),
            ],
            options={
                'ordering': ['created_at'],
            },
        ),
        migrations.CreateModel(
            name='OrderStatusPill',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('state_scope', models.CharField(choices=[('open', 'Open'), ('production_complete', 'Production Complete'), ('shipped', 'Shipped'), ('closed', 'Closed'), ('canceled', 'Canceled')], max_length=30)),
                ('name', models.CharField(help_text='Value stored on Order.status_pill_value', max_length=100)),
                ('color', models.CharField(blank=True, max_length=50)),
                ('is_default', models.BooleanField(default=False)),
                ('is_active', models.BooleanField(default=True)),
                ('sort_order', models.IntegerField(default=0)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('organization', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='order_status_pills', to='organizations.organization')),
            ],
            options={
                'ordering': ['sort_order', 'name'],
                'indexes': [models.Index(fields=['organization', 'state_scope'], name='status_pill_org_scope_idx')],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('is_default', True)), fields=('organization', 'state_scope'), name='status_pill_one_default_per_scope'),
                ],
            },
        ),
        migrations.CreateModel(
            name='OrderAuditLog',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('actor_user_name', models.CharField(default='System', max_length=200)),
                ('action_type', models.CharField(choices=[('status_transition', 'Status Transition'), ('priority_change', 'Priority Change'), ('bulk_line_item_status_update', 'Bulk Line Item Status Update'), ('status_pill_changed', 'Status Pill Changed'), ('order_updated', 'Order Updated')], max_length=50)),
                ('from_status', models.CharField(blank=True, max_length=100, null=True)),
                ('to_status', models.CharField(blank=True, max_length=100, null=True)),
                ('note', models.TextField(blank=True, null=True)),
                ('metadata', models.JSONField(blank=True, null=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('actor', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='order_audit_entries', to=settings.AUTH_USER_MODEL)),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='audit_entries', to='order_lifecycle.order')),
                ('organization', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='order_audit_entries', to='organizations.organization')),
            ],
            options={
                'ordering': ['created_at'],
                'indexes': [
                    models.Index(fields=['order', 'created_at'], name='order_audit_order_created_idx'),
                    models.Index(fields=['action_type'], name='order_audit_action_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='AuditLog',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('user_name', models.CharField(default='System', max_length=200)),
                ('action', models.CharField(choices=[('CREATE', 'Create'), ('UPDATE', 'Update'), ('DELETE', 'Delete')], max_length=20)),
                ('entity_type', models.CharField(help_text='Type of entity (order, status_pill, ...)', max_length=50)),
                ('entity_id', models.CharField(max_length=64)),
                ('entity_name', models.CharField(blank=True, max_length=200)),
                ('description', models.TextField(blank=True)),
                ('old_values', models.JSONField(blank=True, default=dict)),
                ('new_values', models.JSONField(blank=True, default=dict)),
                ('timestamp', models.DateTimeField(default=django.utils.timezone.now)),
                ('organization', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='audit_logs', to='organizations.organization')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='audit_logs', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-timestamp'],
                'indexes': [
                    models.Index(fields=['entity_type', 'entity_id', '-timestamp'], name='audit_entity_ts_idx'),
                    models.Index(fields=['organization', '-timestamp'], name='audit_org_ts_idx'),
                ],
            },
        ),
    ]
