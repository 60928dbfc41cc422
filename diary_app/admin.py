# diary_app/admin.py
from django.contrib import admin
from .models import Customer, DiaryEntry, Payment, Subscription, User

@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ['email', 'full_name', 'role', 'exempt_from_limits', 'timezone', 'created_at']
    list_filter = ['role', 'exempt_from_limits', 'created_at']
    search_fields = ['email', 'full_name', 'firebase_uid']
    readonly_fields = ['id', 'created_at', 'updated_at']

@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ['name', 'owner', 'default_quantity', 'price_per_unit', 'phone', 'created_at']
    search_fields = ['name', 'phone', 'address', 'owner__email']
    readonly_fields = ['id', 'created_at']

@admin.register(DiaryEntry)
class DiaryEntryAdmin(admin.ModelAdmin):
    list_display = ['customer', 'date', 'quantity', 'amount', 'milk_quality', 'delivered']
    list_filter = ['delivered', 'milk_quality', 'date']
    search_fields = ['customer__name', 'owner__email']
    readonly_fields = ['id', 'created_at', 'updated_at']

@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['customer', 'amount', 'method', 'date', 'created_at']
    list_filter = ['method', 'date']
    search_fields = ['customer__name', 'owner__email']
    readonly_fields = ['id', 'created_at']

@admin.register(Subscription)
class SubscriptionAdmin(admin.ModelAdmin):
    list_display = ['user', 'plan', 'entry_limit', 'start_date', 'end_date']
    list_filter = ['plan']
    search_fields = ['user__email']
    readonly_fields = ['id', 'created_at', 'updated_at']
