"""API views for the booking lifecycle."""

from __future__ import annotations

from drf_spectacular.utils import extend_schema  # type: ignore
from rest_framework import status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.finances import ledger as payment_ledger
from apps.tenants.permissions import TenantScopedMixin

from . import repositories, selectors
from .application import command_handlers as commands
from .filters import BookingFilterSet
from .models import Booking
from .serializers import (
    BookingChargeSerializer,
    BookingCreateSerializer,
    BookingSerializer,
    BookingUpdateSerializer,
    CancelSerializer,
    ChargeCreateSerializer,
    CheckEventSerializer,
    CheckInSerializer,
    CheckOutSerializer,
    LedgerSerializer,
    OverstayChargeSerializer,
)

UUID_PATTERN = "[0-9a-fA-F-]{36}"


class BookingViewSet(TenantScopedMixin, viewsets.GenericViewSet):
    """Bookings of the calling tenant; every write goes through a command handler."""

    serializer_class = BookingSerializer
    filterset_class = BookingFilterSet
    lookup_value_regex = UUID_PATTERN

    def get_queryset(self):  # type: ignore
        if getattr(self, "swagger_fake_view", False):
            return Booking.objects.none()
        return selectors.base_queryset(self.tenant_id).order_by("-check_in")

    def list(self, request, *args, **kwargs):  # type: ignore
        queryset = selectors.filter_bookings(self.tenant_id, request.query_params)
        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = self.get_serializer(selectors.attach_ledger(page), many=True)
            return self.get_paginated_response(serializer.data)
        serializer = self.get_serializer(selectors.attach_ledger(queryset), many=True)
        return Response(serializer.data)

    def _detail(self, booking_id, status_code=status.HTTP_200_OK) -> Response:
        rows = selectors.attach_ledger(self.get_queryset().filter(pk=booking_id))
        return Response(BookingSerializer(rows[0]).data, status=status_code)

    def retrieve(self, request, pk=None):  # type: ignore
        repositories.get_booking(self.tenant_id, pk)
        return self._detail(pk)

    @extend_schema(request=BookingCreateSerializer, responses=BookingSerializer)
    def create(self, request):  # type: ignore
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = commands.CreateBookingHandler().handle(
            commands.CreateBookingCommand(
                tenant_id=self.tenant_id,
                actor_id=self.actor_id,
                **serializer.validated_data,
            )
        )
        return self._detail(booking.pk, status.HTTP_201_CREATED)

    @extend_schema(request=BookingUpdateSerializer, responses=BookingSerializer)
    def partial_update(self, request, pk=None):  # type: ignore
        serializer = BookingUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        booking = commands.EditBookingHandler().handle(
            commands.EditBookingCommand(
                tenant_id=self.tenant_id,
                booking_id=pk,
                actor_id=self.actor_id,
                **serializer.validated_data,
            )
        )
        return self._detail(booking.pk)

    def destroy(self, request, pk=None):  # type: ignore
        commands.DeleteBookingHandler().handle(
            commands.DeleteBookingCommand(tenant_id=self.tenant_id, booking_id=pk, actor_id=self.actor_id)
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=CheckInSerializer, responses=BookingSerializer)
    @action(detail=True, methods=["post"], url_path="check-in")
    def check_in(self, request, pk=None):  # type: ignore
        serializer = CheckInSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        booking = commands.CheckInHandler().handle(
            commands.CheckInCommand(
                tenant_id=self.tenant_id,
                booking_id=pk,
                actor_id=self.actor_id,
                guest_details=data.pop("guest", None) or {},
                **data,
            )
        )
        return self._detail(booking.pk)

    @extend_schema(request=CheckOutSerializer, responses=BookingSerializer)
    @action(detail=True, methods=["post"], url_path="check-out")
    def check_out(self, request, pk=None):  # type: ignore
        serializer = CheckOutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = commands.CheckOutHandler().handle(
            commands.CheckOutCommand(
                tenant_id=self.tenant_id,
                booking_id=pk,
                actor_id=self.actor_id,
                **serializer.validated_data,
            )
        )
        return self._detail(booking.pk)

    @extend_schema(request=CancelSerializer, responses=BookingSerializer)
    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        serializer = CancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = commands.CancelBookingHandler().handle(
            commands.CancelBookingCommand(
                tenant_id=self.tenant_id,
                booking_id=pk,
                actor_id=self.actor_id,
                reason=serializer.validated_data["reason"],
            )
        )
        return self._detail(booking.pk)

    @extend_schema(request=None, responses=BookingSerializer)
    @action(detail=True, methods=["post"], url_path="no-show")
    def no_show(self, request, pk=None):  # type: ignore
        booking = commands.MarkNoShowHandler().handle(
            commands.MarkNoShowCommand(tenant_id=self.tenant_id, booking_id=pk, actor_id=self.actor_id)
        )
        return self._detail(booking.pk)

    @extend_schema(responses=LedgerSerializer)
    @action(detail=True, methods=["get"])
    def ledger(self, request, pk=None):  # type: ignore
        booking = repositories.get_booking(self.tenant_id, pk)
        snapshot = payment_ledger.reconcile(self.tenant_id, booking)
        charges = booking.charges.filter(tenant_id=self.tenant_id)
        return Response({
            **LedgerSerializer(snapshot).data,
            "charges": BookingChargeSerializer(charges, many=True).data,
        })

    @extend_schema(request=ChargeCreateSerializer, responses=BookingChargeSerializer)
    @action(detail=True, methods=["post"])
    def charges(self, request, pk=None):  # type: ignore
        serializer = ChargeCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        charge, snapshot = commands.AddChargeHandler().handle(
            commands.AddChargeCommand(
                tenant_id=self.tenant_id,
                booking_id=pk,
                actor_id=self.actor_id,
                **serializer.validated_data,
            )
        )
        return Response(
            {"charge": BookingChargeSerializer(charge).data, "ledger": LedgerSerializer(snapshot).data},
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(request=OverstayChargeSerializer, responses=BookingChargeSerializer)
    @action(detail=True, methods=["post"], url_path="overstay-charge")
    def overstay_charge(self, request, pk=None):  # type: ignore
        serializer = OverstayChargeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        charge, snapshot = commands.AddOverstayChargeHandler().handle(
            commands.AddOverstayChargeCommand(
                tenant_id=self.tenant_id,
                booking_id=pk,
                actor_id=self.actor_id,
                **serializer.validated_data,
            )
        )
        return Response(
            {"charge": BookingChargeSerializer(charge).data, "ledger": LedgerSerializer(snapshot).data},
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(request=None, responses=BookingChargeSerializer)
    @action(detail=True, methods=["post"], url_path=rf"charges/(?P<charge_id>{UUID_PATTERN})/void")
    def void_charge(self, request, pk=None, charge_id=None):  # type: ignore
        charge, snapshot = commands.VoidChargeHandler().handle(
            commands.VoidChargeCommand(
                tenant_id=self.tenant_id,
                booking_id=pk,
                charge_id=charge_id,
                actor_id=self.actor_id,
            )
        )
        return Response({"charge": BookingChargeSerializer(charge).data, "ledger": LedgerSerializer(snapshot).data})

    @extend_schema(responses=CheckEventSerializer(many=True))
    @action(detail=True, methods=["get"], url_path="check-events")
    def check_events(self, request, pk=None):  # type: ignore
        booking = repositories.get_booking(self.tenant_id, pk)
        events = booking.check_events.filter(tenant_id=self.tenant_id)
        return Response(CheckEventSerializer(events, many=True).data)

    @action(detail=False, methods=["get"], url_path="arrivals/today")
    def arrivals_today(self, request):  # type: ignore
        rows = selectors.arrivals_today(self.tenant_id)
        return Response({"bookings": BookingSerializer(rows, many=True).data})

    @action(detail=False, methods=["get"], url_path="in-house")
    def in_house(self, request):  # type: ignore
        rows = selectors.in_house(self.tenant_id, q=request.query_params.get("q", ""))
        return Response({"bookings": BookingSerializer(rows, many=True).data})

    @action(detail=False, methods=["get"])
    def outstanding(self, request):  # type: ignore
        rows = selectors.outstanding_balances(self.tenant_id)
        return Response({"items": BookingSerializer(rows, many=True).data})
