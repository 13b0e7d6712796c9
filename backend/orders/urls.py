from django.urls import path
from . import views

urlpatterns = [
    # Pricing and reference data
    path('pricing/calculate/', views.pricing_calculate, name='pricing-calculate'),
    path('pricing/countries/', views.pricing_countries, name='pricing-countries'),
    path('tracking-stages/', views.tracking_stages, name='tracking-stages'),
    path('forbidden-items/', views.forbidden_items, name='forbidden-items'),

    # Delivery requests
    path('requests/', views.request_create, name='request-create'),
    path('requests/sent/', views.sent_requests, name='request-sent'),
    path('requests/received/', views.received_requests, name='request-received'),
    path('requests/<int:pk>/', views.request_detail, name='request-detail'),
    path('requests/<int:pk>/respond/', views.request_respond, name='request-respond'),
    path('requests/<int:pk>/cancel/', views.request_cancel, name='request-cancel'),
    path('requests/<int:pk>/propose-changes/', views.request_propose_changes, name='request-propose-changes'),
    path('requests/<int:pk>/review-changes/', views.request_review_changes, name='request-review-changes'),
    path('requests/<int:pk>/tracking/', views.request_tracking, name='request-tracking'),
    path('requests/<int:pk>/inspection-photos/', views.request_inspection_photos, name='request-inspection-photos'),
    path('requests/<int:pk>/sender-photos/', views.request_sender_photos, name='request-sender-photos'),
    path('requests/<int:pk>/payment/', views.request_payment, name='request-payment'),
    path('admin/payments/', views.admin_payments, name='admin-payments'),
    path('admin/payments/<int:pk>/review/', views.admin_payment_review, name='admin-payment-review'),

    # General orders
    path('general-orders/', views.general_order_create, name='general-order-create'),
    path('general-orders/available/', views.general_orders_available, name='general-orders-available'),
    path('general-orders/mine/', views.general_orders_mine, name='general-orders-mine'),
    path('general-orders/claimed/', views.general_orders_claimed, name='general-orders-claimed'),
    path('general-orders/<int:pk>/', views.general_order_delete, name='general-order-delete'),
    path('general-orders/<int:pk>/claim/', views.general_order_claim, name='general-order-claim'),
    path('admin/general-orders/', views.admin_general_orders, name='admin-general-orders'),
    path('admin/general-orders/<int:pk>/review/', views.admin_general_order_review, name='admin-general-order-review'),
]
