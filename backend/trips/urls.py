from django.urls import path
from .views import (
    trip_list_create, my_trips, trip_detail, trip_approve, admin_pending_trips,
    trip_ticket_upload, create_trip_tickets_bucket,
)

urlpatterns = [
    path('trips/', trip_list_create, name='trip-list-create'),
    path('trips/mine/', my_trips, name='my-trips'),
    path('trips/tickets/', trip_ticket_upload, name='trip-ticket-upload'),
    path('trips/<int:pk>/', trip_detail, name='trip-detail'),
    path('trips/<int:pk>/approve/', trip_approve, name='trip-approve'),
    path('admin/trips/pending/', admin_pending_trips, name='admin-pending-trips'),

    # Functions
    path('functions/create-trip-tickets-bucket/', create_trip_tickets_bucket, name='create-trip-tickets-bucket'),
]
