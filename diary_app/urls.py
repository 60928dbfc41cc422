# diary_app/urls.py
from django.urls import path
from . import views

urlpatterns = [
    # Authentication
    path('auth/signup/', views.signup, name='signup'),
    path('auth/login/', views.login, name='login'),
    path('auth/refresh/', views.refresh_token, name='refresh_token'),

    # User Profile
    path('user/me/', views.user_profile, name='user_profile'),

    # Customers
    path('customers/', views.customers, name='customers'),
    path('customers/<uuid:customer_id>/', views.customer_detail, name='customer_detail'),
    path('customers/<uuid:customer_id>/ledger/', views.customer_ledger, name='customer_ledger'),

    # Delivery diary
    path('entries/', views.diary_entries, name='diary_entries'),
    path('entries/<uuid:entry_id>/', views.diary_entry_detail, name='diary_entry_detail'),
    path('entries/<uuid:entry_id>/price/', views.correct_entry_price, name='correct_entry_price'),

    # Payments
    path('payments/', views.payments, name='payments'),
    path('payments/<uuid:payment_id>/', views.payment_detail, name='payment_detail'),

    # Reports
    path('reports/monthly/', views.monthly_report, name='monthly_report'),
    path('reports/monthly/csv/', views.monthly_report_csv_export, name='monthly_report_csv'),
    path('reports/monthly/<uuid:customer_id>/', views.monthly_customer_detail, name='monthly_customer_detail'),
    path('dashboard/', views.dashboard, name='dashboard'),

    # Subscription
    path('subscription/', views.user_subscription, name='user_subscription'),

    # Admin
    path('admin/users/', views.admin_users, name='admin_users'),
    path('admin/users/<uuid:user_id>/subscription/', views.admin_update_plan, name='admin_update_plan'),
]
