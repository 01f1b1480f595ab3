from django.contrib import admin

from .models import Contact, Order, Product, SyncLog


@admin.register(SyncLog)
class SyncLogAdmin(admin.ModelAdmin):
    list_display = [
        'created_at', 'entity_type', 'operation', 'status',
        'items_processed', 'items_created', 'items_updated', 'items_skipped',
        'api_calls_used', 'created_by',
    ]
    list_filter = ['entity_type', 'operation', 'status']
    readonly_fields = [f.name for f in SyncLog._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(Contact)
class ContactAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'cpf_cnpj', 'tiny_customer_id', 'tiny_synced_at']
    search_fields = ['name', 'email', 'cpf_cnpj']
    readonly_fields = ['tiny_customer_id', 'tiny_hash', 'tiny_synced_at']


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['sku', 'name', 'unit_price', 'tiny_product_id', 'tiny_synced_at']
    search_fields = ['sku', 'name']
    readonly_fields = ['tiny_product_id', 'tiny_hash', 'tiny_synced_at']


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['order_number', 'status', 'total', 'tiny_order_id', 'tiny_synced_at']
    search_fields = ['order_number']
    readonly_fields = ['tiny_order_id', 'tiny_hash', 'tiny_synced_at']
