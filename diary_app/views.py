# diary_app/views.py
import logging

import jwt
from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.http import HttpResponse
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from . import exceptions, services
from .billing import (
    balance_for_row, month_entries_for_customer, month_payments_for_customer, paid_in_month,
    search_rows, sort_rows, summarize_dashboard, summarize_month,
)
from .ledger import summarize_customer
from .models import DiaryEntry, Payment, User
from .permission import IsAdmin, IsJWTAuthenticated
from .reports import (
    csv_filename, ledger_share_text, month_share_text, monthly_report_csv, whatsapp_url,
)
from .serializers import (
    AdminUserSerializer, CreateDiaryEntrySerializer, CreatePaymentSerializer, CustomerSerializer,
    DashboardSerializer, DiaryEntrySerializer, LedgerSerializer, MonthlyReportQuerySerializer,
    MonthlyRowSerializer, MonthlySummarySerializer, PaymentSerializer, PlanChangeSerializer,
    PriceCorrectionSerializer, RefreshTokenSerializer, SubscriptionSerializer,
    UpdateDiaryEntrySerializer, UserLoginSerializer, UserRegistrationSerializer, UserSerializer,
)
from .subscription import DEMO_LIMIT_MESSAGE, current_plan_label, entry_usage
from .utils import (
    current_month, generate_jwt_tokens, local_today, month_label, parse_date, shift_month,
)

logger = logging.getLogger(__name__)


def error_response(exc):
    if isinstance(exc, exceptions.NotFoundError):
        return Response({'error': str(exc)}, status=status.HTTP_404_NOT_FOUND)
    return Response({'error': str(exc)}, status=status.HTTP_400_BAD_REQUEST)


def _tokens_response(user, created=False):
    access_token, refresh_token = generate_jwt_tokens(user)
    return Response({
        'access_token': access_token,
        'refresh_token': refresh_token,
        'user': UserSerializer(user).data
    }, status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)


# Authentication Views
@api_view(['POST'])
@permission_classes([AllowAny])
def signup(request):
    serializer = UserRegistrationSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    decoded_token = serializer.context['decoded_token']
    firebase_uid = decoded_token.get('uid')
    email = decoded_token.get('email', '')
    full_name = serializer.validated_data.get('full_name', '')

    try:
        with transaction.atomic():
            user, created = User.objects.get_or_create(
                firebase_uid=firebase_uid,
                defaults={'email': email, 'full_name': full_name}
            )
            if not created and full_name:
                user.full_name = full_name
                user.save()
            # new accounts start on the demo plan
            services.start_demo(user)
    except IntegrityError:
        return Response(
            {'error': 'Account for this Firebase user already exists'},
            status=status.HTTP_400_BAD_REQUEST
        )

    if created:
        logger.info(f"Account {user.id} registered for {email}")
    return _tokens_response(user, created)

@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    serializer = UserLoginSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    firebase_uid = serializer.context['decoded_token'].get('uid')
    try:
        user = User.objects.get(firebase_uid=firebase_uid)
    except User.DoesNotExist:
        return Response(
            {'error': 'User not found. Please sign up first.'},
            status=status.HTTP_404_NOT_FOUND
        )
    return _tokens_response(user)

@api_view(['POST'])
@permission_classes([AllowAny])
def refresh_token(request):
    serializer = RefreshTokenSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        payload = jwt.decode(
            serializer.validated_data['refresh_token'],
            settings.JWT_SECRET_KEY,
            algorithms=['HS256']
        )
    except jwt.ExpiredSignatureError:
        return Response({'error': 'Refresh token expired'}, status=status.HTTP_401_UNAUTHORIZED)
    except jwt.InvalidTokenError:
        return Response({'error': 'Invalid refresh token'}, status=status.HTTP_400_BAD_REQUEST)

    if payload.get('type') != 'refresh':
        return Response({'error': 'Invalid token type'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        user = User.objects.get(id=payload['user_id'])
    except User.DoesNotExist:
        return Response({'error': 'User not found'}, status=status.HTTP_404_NOT_FOUND)

    access_token, new_refresh_token = generate_jwt_tokens(user)
    return Response({
        'access_token': access_token,
        'refresh_token': new_refresh_token
    })


# User Views
@api_view(['GET', 'PUT'])
@permission_classes([IsJWTAuthenticated])
def user_profile(request):
    if request.method == 'GET':
        return Response(UserSerializer(request.user).data)

    serializer = UserSerializer(request.user, data=request.data, partial=True)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# Customer Views
@api_view(['GET', 'POST'])
@permission_classes([IsJWTAuthenticated])
def customers(request):
    if request.method == 'GET':
        rows = request.user.customers.all()
        return Response(CustomerSerializer(rows, many=True).data)

    serializer = CustomerSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        customer = services.create_customer(request.user, **serializer.validated_data)
    except exceptions.DiaryError as e:
        return error_response(e)
    return Response(CustomerSerializer(customer).data, status=status.HTTP_201_CREATED)

@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsJWTAuthenticated])
def customer_detail(request, customer_id):
    try:
        if request.method == 'GET':
            customer = services.get_customer(request.user, customer_id)
            return Response(CustomerSerializer(customer).data)

        if request.method == 'PUT':
            serializer = CustomerSerializer(data=request.data, partial=True)
            if not serializer.is_valid():
                return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
            customer = services.update_customer(request.user, customer_id, serializer.validated_data)
            return Response(CustomerSerializer(customer).data)

        entries_deleted, payments_deleted = services.delete_customer(request.user, customer_id)
    except exceptions.DiaryError as e:
        return error_response(e)

    return Response({
        'message': 'Customer deleted successfully',
        'entries_deleted': entries_deleted,
        'payments_deleted': payments_deleted
    })

@api_view(['GET'])
@permission_classes([IsJWTAuthenticated])
def customer_ledger(request, customer_id):
    """Lifetime totals for a customer with entry and payment history"""
    snapshot = services.load_snapshot(request.user)
    customer = next((c for c in snapshot.customers if str(c.id) == str(customer_id)), None)
    if customer is None:
        return Response({'error': 'Customer not found.'}, status=status.HTTP_404_NOT_FOUND)

    ledger = summarize_customer(customer.id, snapshot.entries, snapshot.payments)
    entries = sorted(
        (e for e in snapshot.entries if e.customer_id == customer.id),
        key=lambda e: e.date, reverse=True
    )
    payments = sorted(
        (p for p in snapshot.payments if p.customer_id == customer.id),
        key=lambda p: p.date, reverse=True
    )

    return Response({
        'customer': CustomerSerializer(customer).data,
        'ledger': LedgerSerializer(ledger).data,
        'entries': DiaryEntrySerializer(entries, many=True).data,
        'payments': PaymentSerializer(payments, many=True).data,
        'share_url': whatsapp_url(customer.phone, ledger_share_text(customer.name, ledger)),
    })


# Diary Entry Views
@api_view(['GET', 'POST'])
@permission_classes([IsJWTAuthenticated])
def diary_entries(request):
    if request.method == 'GET':
        entries = DiaryEntry.objects.filter(owner=request.user).select_related('customer')
        date_str = request.GET.get('date')
        if date_str:
            try:
                entries = entries.filter(date=parse_date(date_str))
            except exceptions.ValidationError as e:
                return error_response(e)
        return Response(DiaryEntrySerializer(entries, many=True).data)

    serializer = CreateDiaryEntrySerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        decision, entry = services.record_entry(request.user, **serializer.validated_data)
    except exceptions.DiaryError as e:
        return error_response(e)

    if not decision:
        return Response(
            {'error': DEMO_LIMIT_MESSAGE, 'reason': decision.reason},
            status=status.HTTP_403_FORBIDDEN
        )
    return Response(DiaryEntrySerializer(entry).data, status=status.HTTP_201_CREATED)

@api_view(['PUT', 'DELETE'])
@permission_classes([IsJWTAuthenticated])
def diary_entry_detail(request, entry_id):
    try:
        if request.method == 'DELETE':
            services.delete_entry(request.user, entry_id)
            return Response({'message': 'Entry deleted successfully'})

        serializer = UpdateDiaryEntrySerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        entry = services.update_entry(request.user, entry_id, serializer.validated_data)
    except exceptions.DiaryError as e:
        return error_response(e)
    return Response(DiaryEntrySerializer(entry).data)

@api_view(['POST'])
@permission_classes([IsJWTAuthenticated])
def correct_entry_price(request, entry_id):
    """Re-price one entry at a new price per litre"""
    serializer = PriceCorrectionSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        entry = services.correct_entry_price(
            request.user, entry_id, serializer.validated_data['price_per_unit']
        )
    except exceptions.DiaryError as e:
        return error_response(e)
    return Response(DiaryEntrySerializer(entry).data)


# Payment Views
@api_view(['GET', 'POST'])
@permission_classes([IsJWTAuthenticated])
def payments(request):
    if request.method == 'GET':
        rows = Payment.objects.filter(owner=request.user).select_related('customer')
        customer_id = request.GET.get('customer_id')
        if customer_id:
            try:
                rows = rows.filter(customer_id=customer_id)
            except DjangoValidationError:
                return Response({'error': 'Invalid customer_id'}, status=status.HTTP_400_BAD_REQUEST)
        return Response(PaymentSerializer(rows, many=True).data)

    serializer = CreatePaymentSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        payment = services.add_payment(request.user, **serializer.validated_data)
    except exceptions.DiaryError as e:
        return error_response(e)
    return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)

@api_view(['DELETE'])
@permission_classes([IsJWTAuthenticated])
def payment_detail(request, payment_id):
    try:
        services.delete_payment(request.user, payment_id)
    except exceptions.DiaryError as e:
        return error_response(e)
    return Response({'message': 'Payment deleted successfully'})


# Report Views
def _report_query(request):
    query = MonthlyReportQuerySerializer(data=request.GET)
    query.is_valid(raise_exception=True)
    data = query.validated_data
    month = data.get('month') or current_month(request.user.timezone)
    return month, data['sort'], data['q']

def _breakdown_rows(rows, payments, month):
    data = []
    for row in rows:
        paid = paid_in_month(row.customer_id, payments, month)
        data.append({
            'customer_id': row.customer_id,
            'customer_name': row.customer_name,
            'delivery_count': row.delivery_count,
            'total_quantity': row.total_quantity,
            'total_amount': row.total_amount,
            'paid': paid,
            'balance': row.total_amount - paid,
        })
    return data

@api_view(['GET'])
@permission_classes([IsJWTAuthenticated])
def monthly_report(request):
    """Monthly summary with per-customer billed, paid and balance"""
    month, sort_by, search = _report_query(request)
    snapshot = services.load_snapshot(request.user)

    summary = summarize_month(snapshot.customers, snapshot.entries, snapshot.payments, month)
    rows = search_rows(summary.customer_breakdown, snapshot.customers, search)
    rows = sort_rows(rows, snapshot.payments, month, sort_by)

    return Response(MonthlySummarySerializer({
        'month': month,
        'month_label': month_label(month),
        'previous_month': shift_month(month, -1),
        'next_month': shift_month(month, 1),
        'total_quantity': summary.total_quantity,
        'total_revenue': summary.total_revenue,
        'delivery_count': summary.delivery_count,
        'customer_breakdown': _breakdown_rows(rows, snapshot.payments, month),
    }).data)

@api_view(['GET'])
@permission_classes([IsJWTAuthenticated])
def monthly_report_csv_export(request):
    month, _sort, _search = _report_query(request)
    snapshot = services.load_snapshot(request.user)
    summary = summarize_month(snapshot.customers, snapshot.entries, snapshot.payments, month)

    response = HttpResponse(monthly_report_csv(summary, snapshot.payments), content_type='text/csv; charset=utf-8')
    response['Content-Disposition'] = f'attachment; filename="{csv_filename(month)}"'
    return response

@api_view(['GET'])
@permission_classes([IsJWTAuthenticated])
def monthly_customer_detail(request, customer_id):
    """One customer's entries and payments for a month, with share link"""
    month, _sort, _search = _report_query(request)
    snapshot = services.load_snapshot(request.user)
    summary = summarize_month(snapshot.customers, snapshot.entries, snapshot.payments, month)

    row = next((r for r in summary.customer_breakdown if str(r.customer_id) == str(customer_id)), None)
    if row is None:
        return Response({'error': 'No activity for this customer in the month'}, status=status.HTTP_404_NOT_FOUND)

    customer = next((c for c in snapshot.customers if c.id == row.customer_id), None)
    paid = paid_in_month(row.customer_id, snapshot.payments, month)
    share_url = None
    if customer is not None:
        share_url = whatsapp_url(customer.phone, month_share_text(customer.name, month, row, paid))

    return Response({
        'month': month,
        'row': MonthlyRowSerializer(_breakdown_rows([row], snapshot.payments, month)[0]).data,
        'balance': f"{balance_for_row(row, snapshot.payments, month):.2f}",
        'entries': DiaryEntrySerializer(
            month_entries_for_customer(row.customer_id, snapshot.entries, month), many=True
        ).data,
        'payments': PaymentSerializer(
            month_payments_for_customer(row.customer_id, snapshot.payments, month), many=True
        ).data,
        'share_url': share_url,
    })

@api_view(['GET'])
@permission_classes([IsJWTAuthenticated])
def dashboard(request):
    snapshot = services.load_snapshot(request.user)
    stats = summarize_dashboard(snapshot.customers, snapshot.entries, local_today(request.user.timezone))
    account = services.account_for_user(request.user, snapshot.subscription)

    data = DashboardSerializer(stats).data
    data['usage'] = entry_usage(account, len(snapshot.entries))
    return Response(data)


# Subscription Views
@api_view(['GET'])
@permission_classes([IsJWTAuthenticated])
def user_subscription(request):
    """Effective plan for the account; no record means the demo plan"""
    snapshot = services.load_snapshot(request.user)
    account = services.account_for_user(request.user, snapshot.subscription)
    return Response({
        'subscription': SubscriptionSerializer(snapshot.subscription).data if snapshot.subscription else None,
        'plan_label': current_plan_label(account),
        'usage': entry_usage(account, len(snapshot.entries)),
    })


# Admin Views
@api_view(['GET'])
@permission_classes([IsAdmin])
def admin_users(request):
    users = User.objects.select_related('subscription').order_by('created_at')
    return Response(AdminUserSerializer(users, many=True).data)

@api_view(['PUT'])
@permission_classes([IsAdmin])
def admin_update_plan(request, user_id):
    serializer = PlanChangeSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        subscription = services.change_plan(
            user_id,
            serializer.validated_data['plan'],
            serializer.validated_data.get('effective_date'),
        )
    except exceptions.DiaryError as e:
        return error_response(e)
    return Response({
        'message': 'Subscription updated successfully',
        'subscription': SubscriptionSerializer(subscription).data
    })
