# diary_app/serializers.py
from decimal import Decimal

import pytz
from rest_framework import serializers
from .models import Customer, DiaryEntry, Payment, Subscription, User
from .firebase_config import FirebaseConfig
from .ledger import derived_unit_price
from .billing import SORT_CHOICES


class FirebaseTokenSerializer(serializers.Serializer):
    firebase_id_token = serializers.CharField()

    def validate_firebase_id_token(self, value):
        firebase_config = FirebaseConfig()
        decoded_token = firebase_config.verify_id_token(value)
        if not decoded_token:
            raise serializers.ValidationError("Invalid Firebase ID token")
        self.context['decoded_token'] = decoded_token
        return value

class UserRegistrationSerializer(FirebaseTokenSerializer):
    full_name = serializers.CharField(max_length=255, required=False, allow_blank=True)

class UserLoginSerializer(FirebaseTokenSerializer):
    pass

class RefreshTokenSerializer(serializers.Serializer):
    refresh_token = serializers.CharField()

class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'email', 'full_name', 'timezone', 'role', 'exempt_from_limits',
                  'business_phone', 'business_address', 'created_at', 'updated_at']
        read_only_fields = ['id', 'email', 'role', 'exempt_from_limits', 'created_at', 'updated_at']

    def validate_timezone(self, value):
        if value not in pytz.all_timezones_set:
            raise serializers.ValidationError(f"Unknown timezone {value}")
        return value


class SubscriptionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Subscription
        fields = ['plan', 'entry_limit', 'start_date', 'end_date']
        read_only_fields = fields

class PlanChangeSerializer(serializers.Serializer):
    plan = serializers.ChoiceField(choices=Subscription.PLAN_CHOICES)
    effective_date = serializers.DateField(required=False)

class AdminUserSerializer(serializers.ModelSerializer):
    subscription = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'email', 'full_name', 'role', 'exempt_from_limits', 'created_at', 'subscription']

    def get_subscription(self, obj):
        try:
            return SubscriptionSerializer(obj.subscription).data
        except Subscription.DoesNotExist:
            return None


class CustomerSerializer(serializers.ModelSerializer):
    default_quantity = serializers.DecimalField(max_digits=7, decimal_places=2, min_value=Decimal("0.01"))
    price_per_unit = serializers.DecimalField(max_digits=9, decimal_places=2, min_value=Decimal("0.01"))

    class Meta:
        model = Customer
        fields = ['id', 'name', 'default_quantity', 'price_per_unit', 'phone', 'address', 'created_at']
        read_only_fields = ['id', 'created_at']

    def validate_name(self, value):
        if not value.strip():
            raise serializers.ValidationError("Name is required")
        return value.strip()


class DiaryEntrySerializer(serializers.ModelSerializer):
    customer_id = serializers.UUIDField(read_only=True)
    customer_name = serializers.CharField(source='customer.name', read_only=True)
    unit_price = serializers.SerializerMethodField()

    class Meta:
        model = DiaryEntry
        fields = ['id', 'customer_id', 'customer_name', 'date', 'quantity', 'amount', 'unit_price',
                  'notes', 'milk_quality', 'delivered', 'created_at', 'updated_at']
        read_only_fields = fields

    def get_unit_price(self, obj):
        return f"{derived_unit_price(obj):.2f}"

class CreateDiaryEntrySerializer(serializers.Serializer):
    customer_id = serializers.UUIDField(error_messages={'required': 'Please select a customer'})
    date = serializers.DateField()
    quantity = serializers.DecimalField(max_digits=7, decimal_places=2, min_value=Decimal("0.01"))
    notes = serializers.CharField(required=False, allow_blank=True, max_length=500, default='')
    milk_quality = serializers.ChoiceField(
        choices=DiaryEntry.MILK_QUALITY_CHOICES, required=False, allow_null=True, allow_blank=True
    )
    delivered = serializers.BooleanField(default=True)

class UpdateDiaryEntrySerializer(serializers.Serializer):
    delivered = serializers.BooleanField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=500)

class PriceCorrectionSerializer(serializers.Serializer):
    price_per_unit = serializers.DecimalField(max_digits=9, decimal_places=2)


class PaymentSerializer(serializers.ModelSerializer):
    customer_id = serializers.UUIDField(read_only=True)
    customer_name = serializers.CharField(source='customer.name', read_only=True)

    class Meta:
        model = Payment
        fields = ['id', 'customer_id', 'customer_name', 'amount', 'method', 'note', 'date', 'created_at']
        read_only_fields = fields

class CreatePaymentSerializer(serializers.Serializer):
    customer_id = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0.01"))
    method = serializers.ChoiceField(choices=Payment.METHOD_CHOICES, default='cash')
    note = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    date = serializers.DateField(required=False)


# Report output

class MonthlyReportQuerySerializer(serializers.Serializer):
    month = serializers.RegexField(r'^\d{4}-(0[1-9]|1[0-2])$', required=False)
    sort = serializers.ChoiceField(choices=SORT_CHOICES, default='amount')
    q = serializers.CharField(required=False, allow_blank=True, default='')

class MonthlyRowSerializer(serializers.Serializer):
    customer_id = serializers.UUIDField()
    customer_name = serializers.CharField()
    delivery_count = serializers.IntegerField()
    total_quantity = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    paid = serializers.DecimalField(max_digits=12, decimal_places=2)
    balance = serializers.DecimalField(max_digits=12, decimal_places=2)

class MonthlySummarySerializer(serializers.Serializer):
    month = serializers.CharField()
    month_label = serializers.CharField()
    previous_month = serializers.CharField()
    next_month = serializers.CharField()
    total_quantity = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_revenue = serializers.DecimalField(max_digits=12, decimal_places=2)
    delivery_count = serializers.IntegerField()
    customer_breakdown = MonthlyRowSerializer(many=True)

class LedgerSerializer(serializers.Serializer):
    total_delivered_liters = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_billed = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_paid = serializers.DecimalField(max_digits=12, decimal_places=2)
    balance = serializers.DecimalField(max_digits=12, decimal_places=2)

class DashboardSerializer(serializers.Serializer):
    total_customers = serializers.IntegerField()
    monthly_revenue = serializers.DecimalField(max_digits=12, decimal_places=2)
    monthly_quantity = serializers.DecimalField(max_digits=12, decimal_places=2)
    monthly_deliveries = serializers.IntegerField()
    today_revenue = serializers.DecimalField(max_digits=12, decimal_places=2)
    today_deliveries = serializers.IntegerField()
    recent_entries = DiaryEntrySerializer(many=True)
