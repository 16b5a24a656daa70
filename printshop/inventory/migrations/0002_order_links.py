import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('inventory', '0001_initial'),
        ('order_lifecycle', '0001_initial'),
        ('organizations', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='inventoryadjustment',
            name='order',
            field=models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='inventory_adjustments', to='order_lifecycle.order'),
        ),
        migrations.CreateModel(
            name='OrderMaterialUsage',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity_used', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(0)])),
                ('unit_of_measure', models.CharField(max_length=20)),
                ('calculated_by', models.CharField(choices=[('auto', 'Automatic'), ('manual', 'Manual')], default='auto', max_length=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('material', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='usages', to='inventory.material')),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='material_usages', to='order_lifecycle.order')),
                ('order_line_item', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='material_usages', to='order_lifecycle.orderlineitem')),
                ('organization', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='material_usages', to='organizations.organization')),
            ],
            options={
                'verbose_name': 'Order Material Usage',
                'verbose_name_plural': 'Order Material Usage',
                'db_table': 'order_material_usage',
                'ordering': ['created_at'],
                'indexes': [models.Index(fields=['order', 'order_line_item'], name='material_usage_order_item_idx')],
            },
        ),
    ]
