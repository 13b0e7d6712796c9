"""
Issue report e-mails sent through the Resend HTTP API.

Sending is best effort: the report is already stored, so failures are
logged and never raised.
"""
import logging

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

NOT_PROVIDED = 'غير مذكور'
NO_PHOTO = 'لا توجد صورة مرفقة'


def build_report_email(report):
    subject = f"Waslaha - بلاغ عن طلب رقم {report.request_id}"
    text = f"""
تم استلام بلاغ جديد عن طلب.

تفاصيل البلاغ:
- رقم الطلب (request_id): {report.request_id}
- معرف المبلِّغ (user_id): {report.reporter_id}
- بريد المبلِّغ: {report.reporter_email or NOT_PROVIDED}

بيانات المبلِّغ من الملف الشخصي:
- الاسم: {report.reporter_name}
- رقم الهاتف: {report.reporter_phone}

نص المشكلة:
{report.description}

رابط صورة المشكلة (إن وُجد):
{report.problem_photo_url or NO_PHOTO}

--
تم أيضاً حفظ هذا البلاغ في جدول التقارير بلوحة الإدارة.
""".strip()
    return subject, text


def send_report_email(report):
    """Returns True when Resend accepted the message"""
    api_key = settings.RESEND_API_KEY
    recipient = settings.REPORTS_EMAIL_TO
    if not api_key or not recipient:
        logger.warning(f"RESEND_API_KEY or REPORTS_EMAIL_TO is not set; report {report.id} stored without e-mail")
        return False

    subject, text = build_report_email(report)
    headers = {
        'Authorization': f'Bearer {api_key}',
        'Content-Type': 'application/json',
    }
    payload = {
        'from': settings.REPORTS_EMAIL_FROM,
        'to': [recipient],
        'subject': subject,
        'text': text,
    }

    try:
        response = requests.post(settings.RESEND_API_URL, json=payload, headers=headers, timeout=10)
    except requests.exceptions.RequestException as e:
        logger.error(f"Error calling Resend API for report {report.id}: {str(e)}")
        return False

    if not response.ok:
        logger.error(f"Resend email error for report {report.id}: {response.status_code} {response.text}")
        return False
    logger.info(f"Report {report.id} e-mailed to {recipient}")
    return True
