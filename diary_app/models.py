# diary_app/models.py
import uuid
from django.db import models


class User(models.Model):
    ROLE_CHOICES = [
        ('owner', 'Owner'),
        ('admin', 'Admin'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    firebase_uid = models.CharField(max_length=128, unique=True)
    email = models.EmailField(max_length=255)
    full_name = models.CharField(max_length=255, blank=True)
    timezone = models.CharField(max_length=50, default='Asia/Kolkata')
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default='owner')
    exempt_from_limits = models.BooleanField(default=False)
    business_phone = models.CharField(max_length=20, blank=True)
    business_address = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.full_name or self.email} ({self.email})"

    class Meta:
        db_table = 'users'


class Customer(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(User, on_delete=models.CASCADE, related_name='customers')
    name = models.CharField(max_length=255)
    default_quantity = models.DecimalField(max_digits=7, decimal_places=2)
    price_per_unit = models.DecimalField(max_digits=9, decimal_places=2)
    phone = models.CharField(max_length=20, blank=True)
    address = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.name} - {self.default_quantity}L @ {self.price_per_unit}"

    class Meta:
        db_table = 'customers'
        ordering = ['created_at']


class DiaryEntry(models.Model):
    """One delivery of milk to a customer on a date"""
    MILK_QUALITY_CHOICES = [
        ('cow', 'Cow'),
        ('buffalo', 'Buffalo'),
        ('mixed', 'Mixed'),
        ('other', 'Other'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(User, on_delete=models.CASCADE, related_name='diary_entries')
    customer = models.ForeignKey(Customer, on_delete=models.CASCADE, related_name='entries')
    date = models.DateField()
    quantity = models.DecimalField(max_digits=7, decimal_places=2)
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    notes = models.TextField(blank=True, max_length=500)
    milk_quality = models.CharField(max_length=10, choices=MILK_QUALITY_CHOICES, null=True, blank=True)
    delivered = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.customer.name} - {self.date} - {self.quantity}L"

    class Meta:
        db_table = 'diary_entries'
        ordering = ['date', 'created_at']
        verbose_name_plural = 'diary entries'


class Payment(models.Model):
    METHOD_CHOICES = [
        ('cash', 'Cash'),
        ('upi', 'UPI'),
        ('other', 'Other'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(User, on_delete=models.CASCADE, related_name='payments')
    customer = models.ForeignKey(Customer, on_delete=models.CASCADE, related_name='payments')
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    method = models.CharField(max_length=10, choices=METHOD_CHOICES, default='cash')
    note = models.CharField(max_length=255, null=True, blank=True)
    date = models.DateField()
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.customer.name} - {self.amount} ({self.method}) on {self.date}"

    class Meta:
        db_table = 'payments'
        ordering = ['date', 'created_at']


class Subscription(models.Model):
    """Plan record for an account. A missing row means the demo plan."""
    PLAN_CHOICES = [
        ('demo', 'Demo'),
        ('monthly', 'Monthly'),
        ('half_yearly', '6 Months'),
        ('yearly', '12 Months'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='subscription')
    plan = models.CharField(max_length=12, choices=PLAN_CHOICES, default='demo')
    entry_limit = models.PositiveIntegerField(null=True, blank=True)  # null = unlimited
    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.user.email} - {self.plan}"

    class Meta:
        db_table = 'subscriptions'
