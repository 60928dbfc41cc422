# diary_app/reports.py
import csv
import io
import re
from urllib.parse import quote

from .billing import paid_in_month
from .utils import fmt2, month_label

URI_COMPONENT_SAFE = "-_.!~*'()"

CSV_HEADER = ['Customer', 'Deliveries', 'Quantity (L)', 'Billed (₹)', 'Paid (₹)', 'Balance (₹)']


def csv_filename(month):
    return f"milkman-report-{month}.csv"


def monthly_report_csv(summary, payments):
    """CSV text for a MonthlySummary, rows in breakdown order, no trailing newline."""
    output = io.StringIO()
    writer = csv.writer(output, lineterminator='\n')
    writer.writerow(CSV_HEADER)
    for row in summary.customer_breakdown:
        paid = paid_in_month(row.customer_id, payments, summary.month)
        writer.writerow([
            row.customer_name,
            row.delivery_count,
            fmt2(row.total_quantity),
            fmt2(row.total_amount),
            fmt2(paid),
            fmt2(row.total_amount - paid),
        ])
    writer.writerow([])
    writer.writerow([
        'Total',
        summary.delivery_count,
        fmt2(summary.total_quantity),
        fmt2(summary.total_revenue),
        '',
        '',
    ])
    return output.getvalue().rstrip('\n')


def month_share_text(customer_name, month, row, paid):
    return '\n'.join([
        f"Milk Report for {customer_name} ({month_label(month)})",
        f"Total Milk: {fmt2(row.total_quantity)} L",
        f"Total Billed: ₹{fmt2(row.total_amount)}",
        f"Total Paid: ₹{fmt2(paid)}",
        f"Balance: ₹{fmt2(row.total_amount - paid)}",
    ])


def ledger_share_text(customer_name, ledger):
    return '\n'.join([
        f"Milk Report for {customer_name}",
        f"Total Milk Delivered: {fmt2(ledger.total_delivered_liters)} L",
        f"Total Billed: ₹{fmt2(ledger.total_billed)}",
        f"Total Paid: ₹{fmt2(ledger.total_paid)}",
        f"Balance Due: ₹{fmt2(ledger.balance)}",
    ])


def whatsapp_url(phone, text):
    """wa.me link for ``phone``, or None when it has no digits."""
    digits = re.sub(r'\D', '', phone or '')
    if not digits:
        return None
    return f"https://wa.me/{digits}?text={quote(text, safe=URI_COMPONENT_SAFE)}"
