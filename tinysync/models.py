from django.conf import settings
from django.db import models


class TinyLinkedModel(models.Model):
    """ERP linkage triple shared by every synced table; written only by the sync job."""

    tiny_hash = models.CharField(max_length=64, null=True, blank=True)
    tiny_synced_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Contact(TinyLinkedModel):
    tiny_customer_id = models.CharField(max_length=50, unique=True, null=True, blank=True)
    name = models.CharField(max_length=255)
    cpf_cnpj = models.CharField(max_length=20, null=True, blank=True)
    email = models.CharField(max_length=255, null=True, blank=True)
    phone = models.CharField(max_length=50, null=True, blank=True)
    notes = models.TextField(null=True, blank=True)

    class Meta:
        db_table = 'contacts'

    def __str__(self):
        return self.name


class Product(TinyLinkedModel):
    tiny_product_id = models.CharField(max_length=50, unique=True, null=True, blank=True)
    name = models.CharField(max_length=255)
    sku = models.CharField(max_length=100, null=True, blank=True)
    description = models.TextField(null=True, blank=True)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    stock_quantity = models.IntegerField(default=0)

    class Meta:
        db_table = 'products'

    def __str__(self):
        return f"{self.sku or '-'} {self.name}"


class Order(TinyLinkedModel):
    tiny_order_id = models.CharField(max_length=50, unique=True, null=True, blank=True)
    order_number = models.CharField(max_length=50)
    contact = models.ForeignKey(Contact, null=True, blank=True, on_delete=models.SET_NULL)
    status = models.CharField(max_length=30, null=True, blank=True)
    items = models.JSONField(default=list)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    total = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    class Meta:
        db_table = 'orders'

    def __str__(self):
        return self.order_number


class SyncLog(models.Model):
    OPERATION_DRY_RUN = 'dry_run'
    OPERATION_APPLY = 'apply'
    OPERATION_CHOICES = [
        (OPERATION_DRY_RUN, 'Dry run'),
        (OPERATION_APPLY, 'Apply'),
    ]

    entity_type = models.CharField(max_length=20)
    operation = models.CharField(max_length=10, choices=OPERATION_CHOICES)
    status = models.CharField(max_length=20, default='success')
    items_processed = models.PositiveIntegerField(default=0)
    items_created = models.PositiveIntegerField(default=0)
    items_updated = models.PositiveIntegerField(default=0)
    items_skipped = models.PositiveIntegerField(default=0)
    api_calls_used = models.PositiveIntegerField(default=0)
    summary = models.JSONField(default=list)
    error_message = models.TextField(null=True, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL,
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'sync_logs'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.entity_type} {self.operation} ({self.status})"
