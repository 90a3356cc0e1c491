"""FilterSet for booking lists."""

from __future__ import annotations

import django_filters  # type: ignore
from django.db.models import Q  # type: ignore

from .domain.lifecycle import ACTIVE_STATUSES
from .models import Booking


class BookingFilterSet(django_filters.FilterSet):
    """Query parameters accepted by ``GET /bookings/``."""

    unit = django_filters.UUIDFilter(field_name="unit_id")
    status = django_filters.ChoiceFilter(choices=Booking.Status.choices)
    payment_status = django_filters.ChoiceFilter(choices=Booking.PaymentStatus.choices)
    active_only = django_filters.BooleanFilter(method="filter_active_only")
    date_from = django_filters.IsoDateTimeFilter(field_name="check_in", lookup_expr="gte")
    date_to = django_filters.IsoDateTimeFilter(field_name="check_in", lookup_expr="lte")
    q = django_filters.CharFilter(method="filter_search")

    class Meta:
        model = Booking
        fields = ["unit", "status", "payment_status"]

    def filter_active_only(self, queryset, name, value):  # type: ignore
        if not value:
            return queryset
        return queryset.filter(status__in=[s.value for s in ACTIVE_STATUSES])

    def filter_search(self, queryset, name, value):  # type: ignore
        value = (value or "").strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(guest_name__icontains=value)
            | Q(guest_email__icontains=value)
            | Q(guest_phone__icontains=value)
            | Q(unit__name__icontains=value)
            | Q(unit__property__name__icontains=value)
        )
