"""Admin registration for restaurant models."""

from django.contrib import admin

from apps.web.restaurant.models import MenuCategory, MenuItem, Order, OrderItem


class MenuItemInline(admin.TabularInline):
    """Inline for items within a category."""

    model = MenuItem
    extra = 0
    fields = ["name", "price", "is_available", "display_order"]


class OrderItemInline(admin.TabularInline):
    """Inline for items within an order. Snapshots are read-only."""

    model = OrderItem
    extra = 0
    can_delete = False
    fields = ["item_name", "menu_item", "quantity", "unit_price", "line_total"]
    readonly_fields = ["item_name", "menu_item", "quantity", "unit_price", "line_total"]

    def has_add_permission(self, request, obj=None):  # type: ignore[no-untyped-def]
        return False


@admin.register(MenuCategory)
class MenuCategoryAdmin(admin.ModelAdmin):
    """Admin for menu categories."""

    list_display = ["name", "is_active", "display_order"]
    list_filter = ["is_active"]
    search_fields = ["name"]
    inlines = [MenuItemInline]
    readonly_fields = ["created_at", "updated_at"]


@admin.register(MenuItem)
class MenuItemAdmin(admin.ModelAdmin):
    """Admin for menu items."""

    list_display = ["name", "category", "price", "is_available"]
    list_filter = ["is_available", "category"]
    search_fields = ["name", "description"]
    readonly_fields = ["created_at", "updated_at"]

    fieldsets = [
        (None, {"fields": ["category", "name", "description", "price"]}),
        ("Media", {"fields": ["image_url"]}),
        ("Availability", {"fields": ["is_available", "display_order"]}),
        ("Timestamps", {"fields": ["created_at", "updated_at"]}),
    ]


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """Admin for orders."""

    list_display = [
        "order_number",
        "customer_name",
        "status",
        "payment_status",
        "order_type",
        "total_amount",
        "created_at",
    ]
    list_filter = ["status", "payment_status", "order_type"]
    search_fields = [
        "number",
        "customer_name",
        "customer_email",
        "customer_phone",
        "payment_checkout_id",
    ]
    inlines = [OrderItemInline]
    readonly_fields = [
        "id",
        "order_number",
        "total_amount",
        "payment_checkout_id",
        "payment_id",
        "created_at",
        "updated_at",
        "paid_at",
        "confirmed_at",
        "cancelled_at",
    ]
    date_hierarchy = "created_at"

    fieldsets = [
        (None, {"fields": ["id", "order_number", "user"]}),
        (
            "Customer",
            {"fields": ["customer_name", "customer_email", "customer_phone"]},
        ),
        (
            "Order Details",
            {
                "fields": [
                    "status",
                    "order_type",
                    "special_instructions",
                    "delivery_address",
                    "total_amount",
                ]
            },
        ),
        (
            "Payment",
            {"fields": ["payment_status", "payment_checkout_id", "payment_id"]},
        ),
        (
            "Timing",
            {"fields": ["estimated_ready_time"]},
        ),
        (
            "Timestamps",
            {
                "fields": [
                    "created_at",
                    "updated_at",
                    "paid_at",
                    "confirmed_at",
                    "cancelled_at",
                ]
            },
        ),
    ]
