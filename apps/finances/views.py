"""API views for payments.

Recording and confirming payments are the only ways money reaches a
booking's ledger; both re-derive the booking's payment status in the
same transaction.
"""

from __future__ import annotations

import logging

import django_filters  # type: ignore
from drf_spectacular.utils import extend_schema  # type: ignore
from rest_framework import mixins, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.tenants.permissions import TenantScopedMixin

from .application import command_handlers as commands
from .models import Payment
from .serializers import (
    FailPaymentSerializer,
    PaymentCreateSerializer,
    PaymentOutcomeSerializer,
    PaymentSerializer,
    RecordPaymentSerializer,
)

logger = logging.getLogger(__name__)


class PaymentFilterSet(django_filters.FilterSet):
    booking = django_filters.UUIDFilter(field_name="booking_id")
    status = django_filters.ChoiceFilter(choices=Payment.Status.choices)

    class Meta:
        model = Payment
        fields = ["booking", "status"]


class PaymentViewSet(
    TenantScopedMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Payments of the calling tenant."""

    serializer_class = PaymentSerializer
    filterset_class = PaymentFilterSet
    lookup_value_regex = "[0-9a-fA-F-]{36}"

    def get_queryset(self):  # type: ignore
        if getattr(self, "swagger_fake_view", False):
            return Payment.objects.none()
        return Payment.objects.filter(tenant_id=self.tenant_id).order_by("-created_at")

    @extend_schema(request=RecordPaymentSerializer, responses=PaymentOutcomeSerializer)
    def create(self, request):  # type: ignore
        serializer = RecordPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        outcome = commands.RecordPaymentHandler().handle(
            commands.RecordPaymentCommand(
                tenant_id=self.tenant_id,
                actor_id=self.actor_id,
                **serializer.validated_data,
            )
        )
        return Response(PaymentOutcomeSerializer(outcome).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=PaymentCreateSerializer, responses=PaymentOutcomeSerializer)
    @action(detail=False, methods=["post"])
    def pending(self, request):  # type: ignore
        serializer = PaymentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        outcome = commands.CreatePendingPaymentHandler().handle(
            commands.CreatePendingPaymentCommand(
                tenant_id=self.tenant_id,
                actor_id=self.actor_id,
                **serializer.validated_data,
            )
        )
        return Response(PaymentOutcomeSerializer(outcome).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses=PaymentOutcomeSerializer)
    @action(detail=True, methods=["post"])
    def confirm(self, request, pk=None):  # type: ignore
        outcome = commands.ConfirmPaymentHandler().handle(
            commands.ConfirmPaymentCommand(tenant_id=self.tenant_id, payment_id=pk, actor_id=self.actor_id)
        )
        return Response(PaymentOutcomeSerializer(outcome).data)

    @extend_schema(request=FailPaymentSerializer, responses=PaymentOutcomeSerializer)
    @action(detail=True, methods=["post"])
    def fail(self, request, pk=None):  # type: ignore
        serializer = FailPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        outcome = commands.FailPaymentHandler().handle(
            commands.FailPaymentCommand(
                tenant_id=self.tenant_id,
                payment_id=pk,
                actor_id=self.actor_id,
                reason=serializer.validated_data["reason"],
            )
        )
        return Response(PaymentOutcomeSerializer(outcome).data)
