"""
Test suite for the reports module
Tests: the report-order-issue function (auth, payload, participants, limit,
stored identity, Resend e-mail) and the admin report/dashboard endpoints
"""
from unittest import mock

import requests
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APIClient

from backend.core.exceptions import MISSING_AUTH_MESSAGE
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.reports.emails import build_report_email
from backend.reports.models import Report

URL = '/api/v1/functions/report-order-issue/'


@override_settings(RESEND_API_KEY='', REPORTS_EMAIL_TO='', MAX_REPORTS_PER_ORDER=3)
class ReportOrderIssueTests(TestCase):
    """Test the issue reporting function"""

    def setUp(self):
        self.sender = TestDataFactory.create_user(first_name='Hiba', last_name='Jasim', phone='7701234567')
        self.delivery_request = TestDataFactory.create_accepted_request(sender=self.sender)
        self.client = AuthenticatedAPIClient().authenticate_user(self.sender)

    def _report(self, client=None, **overrides):
        payload = {'request_id': self.delivery_request.id, 'description': 'The item arrived broken'}
        payload.update(overrides)
        return (client or self.client).post(URL, payload, format='json')

    def test_stores_report_with_profile_identity(self):
        response = self._report(problem_photo_url='https://files.test/broken.jpg')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'success': True})
        report = Report.objects.get()
        self.assertEqual(report.reporter_name, 'Hiba Jasim')
        self.assertEqual(report.reporter_phone, '7701234567')
        self.assertEqual(report.reporter_email, self.sender.email)
        self.assertEqual(report.problem_photo_url, 'https://files.test/broken.jpg')
        self.assertTrue(AuditLog.objects.filter(action='report_create').exists())

    def test_placeholders_when_profile_is_empty(self):
        traveler = self.delivery_request.trip.user
        client = AuthenticatedAPIClient().authenticate_user(traveler)
        self.assertEqual(self._report(client=client).status_code, status.HTTP_200_OK)
        report = Report.objects.get(reporter=traveler)
        self.assertEqual(report.reporter_name, 'بدون اسم')
        self.assertEqual(report.reporter_phone, 'غير مذكور')

    def test_missing_token(self):
        response = self._report(client=APIClient())
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error'], MISSING_AUTH_MESSAGE)

    def test_invalid_payload(self):
        for payload in [{}, {'request_id': self.delivery_request.id}, {'description': 'Broken'}]:
            response = self.client.post(URL, payload, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, payload)
            self.assertEqual(response.data['error'], 'Invalid payload')

    def test_unknown_request(self):
        self.assertEqual(self._report(request_id=999999).status_code, status.HTTP_404_NOT_FOUND)

    def test_non_participant(self):
        outsider = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        self.assertEqual(self._report(client=outsider).status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(Report.objects.exists())

    def test_limit_per_reporter_and_order(self):
        for _ in range(3):
            self.assertEqual(self._report().status_code, status.HTTP_200_OK)
        response = self._report()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Max reports reached for this order')
        self.assertEqual(Report.objects.count(), 3)

        traveler_client = AuthenticatedAPIClient().authenticate_user(self.delivery_request.trip.user)
        self.assertEqual(self._report(client=traveler_client).status_code, status.HTTP_200_OK)

    @mock.patch('backend.reports.emails.requests.post')
    def test_no_email_without_api_key(self, mock_post):
        self._report()
        mock_post.assert_not_called()


@override_settings(
    RESEND_API_KEY='re_test',
    REPORTS_EMAIL_TO='owner@waslaha.app',
    REPORTS_EMAIL_FROM='no-reply@waslaha.app',
    RESEND_API_URL='https://api.resend.com/emails',
)
class ReportEmailTests(TestCase):
    """Test the Resend e-mail sent for each report"""

    def setUp(self):
        self.delivery_request = TestDataFactory.create_accepted_request()
        self.client = AuthenticatedAPIClient().authenticate_user(self.delivery_request.sender)
        self.payload = {'request_id': self.delivery_request.id, 'description': 'Traveler does not answer'}

    @mock.patch('backend.reports.emails.requests.post')
    def test_sends_email(self, mock_post):
        mock_post.return_value = mock.Mock(ok=True, status_code=200)
        response = self.client.post(URL, self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        mock_post.assert_called_once()
        args, kwargs = mock_post.call_args
        self.assertEqual(args[0], 'https://api.resend.com/emails')
        self.assertEqual(kwargs['headers']['Authorization'], 'Bearer re_test')
        self.assertEqual(kwargs['json']['to'], ['owner@waslaha.app'])
        self.assertEqual(kwargs['json']['subject'], f'Waslaha - بلاغ عن طلب رقم {self.delivery_request.id}')
        self.assertIn('Traveler does not answer', kwargs['json']['text'])

    @mock.patch('backend.reports.emails.requests.post')
    def test_email_failure_is_not_surfaced(self, mock_post):
        mock_post.side_effect = requests.exceptions.ConnectionError('down')
        response = self.client.post(URL, self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Report.objects.count(), 1)

    @mock.patch('backend.reports.emails.requests.post')
    def test_resend_error_status_is_not_surfaced(self, mock_post):
        mock_post.return_value = mock.Mock(ok=False, status_code=422, text='invalid from')
        response = self.client.post(URL, self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_email_body_mentions_missing_photo(self):
        report = Report.objects.create(
            request=self.delivery_request,
            reporter=self.delivery_request.sender,
            reporter_name='بدون اسم',
            reporter_phone='غير مذكور',
            description='Late',
        )
        subject, text = build_report_email(report)
        self.assertIn(str(self.delivery_request.id), subject)
        self.assertIn('لا توجد صورة مرفقة', text)


class AdminReportTests(TestCase):
    """Test admin report listing and the dashboard counters"""

    def setUp(self):
        self.admin_client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_admin())

    def test_reports_list_and_dashboard(self):
        delivery_request = TestDataFactory.create_accepted_request()
        Report.objects.create(
            request=delivery_request,
            reporter=delivery_request.sender,
            reporter_name='Test',
            reporter_phone='7701234567',
            description='Problem',
        )
        TestDataFactory.create_trip(is_approved=False)
        TestDataFactory.create_general_order()
        TestDataFactory.create_verification_request(TestDataFactory.create_user())

        reports = self.admin_client.get('/api/v1/admin/reports/')
        self.assertEqual(reports.status_code, status.HTTP_200_OK)
        self.assertEqual(len(reports.data), 1)

        dashboard = self.admin_client.get('/api/v1/admin/dashboard/')
        self.assertEqual(dashboard.data, {
            'pending_trips': 1,
            'pending_verifications': 1,
            'new_general_orders': 1,
            'pending_payments': 0,
            'reports': 1,
        })

    def test_requires_admin(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        self.assertEqual(client.get('/api/v1/admin/reports/').status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(client.get('/api/v1/admin/dashboard/').status_code, status.HTTP_403_FORBIDDEN)
