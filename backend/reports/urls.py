from django.urls import path
from . import views

urlpatterns = [
    path('functions/report-order-issue/', views.report_order_issue, name='report-order-issue'),
    path('admin/reports/', views.admin_reports, name='admin-reports'),
    path('admin/dashboard/', views.admin_dashboard, name='admin-dashboard'),
]
