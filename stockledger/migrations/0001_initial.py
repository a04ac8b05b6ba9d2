"""
Initial migration for Stockledger models.
"""

import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    """Create Stockledger models: Location, Product, ProductLot, StockMovement."""

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Location',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.SlugField(help_text='Unique identifier (e.g. main-store, warehouse)', unique=True, verbose_name='Code')),
                ('name', models.CharField(max_length=100, verbose_name='Name')),
                ('is_active', models.BooleanField(default=True, verbose_name='Active')),
                ('metadata', models.JSONField(blank=True, default=dict, verbose_name='Metadata')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Location',
                'verbose_name_plural': 'Locations',
                'ordering': ['code'],
            },
        ),
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200, verbose_name='Name')),
                ('barcode', models.CharField(blank=True, db_index=True, default='', max_length=64, verbose_name='Barcode')),
                ('is_active', models.BooleanField(default=True, verbose_name='Active')),
                ('stock_quantity', models.IntegerField(default=0, help_text='Cached total. The movement ledger is authoritative.', verbose_name='Stock quantity')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Product',
                'verbose_name_plural': 'Products',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='ProductLot',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('lot_code', models.CharField(help_text='Human-readable code, unique per product.', max_length=50, verbose_name='Lot code')),
                ('expires_on', models.DateField(blank=True, db_index=True, help_text='Last day the lot can be sold. Empty = does not expire.', null=True, verbose_name='Expires on')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created at')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='lots', to='stockledger.product', verbose_name='Product')),
            ],
            options={
                'verbose_name': 'Product lot',
                'verbose_name_plural': 'Product lots',
                'ordering': ['expires_on', 'created_at'],
            },
        ),
        migrations.CreateModel(
            name='StockMovement',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('movement_type', models.CharField(choices=[('RECEIPT', 'Receipt'), ('RETURN', 'Return'), ('SALE', 'Sale'), ('ADJUSTMENT', 'Adjustment'), ('TRANSFER', 'Transfer')], max_length=20, verbose_name='Type')),
                ('quantity', models.IntegerField(help_text='Positive = inbound, Negative = outbound', verbose_name='Quantity')),
                ('reference', models.CharField(blank=True, default='', max_length=255, verbose_name='Reference')),
                ('metadata', models.JSONField(blank=True, default=dict, verbose_name='Metadata')),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Created at')),
                ('location', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='movements', to='stockledger.location', verbose_name='Location')),
                ('lot', models.ForeignKey(blank=True, help_text='Empty = unlotted stock', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='movements', to='stockledger.productlot', verbose_name='Lot')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='movements', to='stockledger.product', verbose_name='Product')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='User')),
            ],
            options={
                'verbose_name': 'Stock movement',
                'verbose_name_plural': 'Stock movements',
                'ordering': ['created_at'],
            },
        ),
        migrations.AddConstraint(
            model_name='productlot',
            constraint=models.UniqueConstraint(fields=('product', 'lot_code'), name='unique_lot_code_per_product'),
        ),
        migrations.AddIndex(
            model_name='stockmovement',
            index=models.Index(fields=['product', 'created_at'], name='stockledger_product_e1a2b3_idx'),
        ),
        migrations.AddIndex(
            model_name='stockmovement',
            index=models.Index(fields=['lot', 'created_at'], name='stockledger_lot_id_4c5d6e_idx'),
        ),
        migrations.AddIndex(
            model_name='stockmovement',
            index=models.Index(fields=['product', 'location'], name='stockledger_product_7f8a9b_idx'),
        ),
    ]
