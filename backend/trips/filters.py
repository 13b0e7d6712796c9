import django_filters
from django.utils import timezone

from .models import Trip


class TripFilter(django_filters.FilterSet):
    """Filters for the public trips list"""
    from_country = django_filters.CharFilter(field_name='from_country', lookup_expr='exact')
    to_country = django_filters.CharFilter(field_name='to_country', lookup_expr='exact')
    # Trips on or after the given date
    trip_date = django_filters.DateFilter(field_name='trip_date', lookup_expr='gte')
    upcoming = django_filters.BooleanFilter(method='filter_upcoming', label='Upcoming only')

    class Meta:
        model = Trip
        fields = ['from_country', 'to_country', 'trip_date', 'upcoming']

    def filter_upcoming(self, queryset, name, value):
        if value:
            return queryset.filter(trip_date__gte=timezone.localdate())
        return queryset
