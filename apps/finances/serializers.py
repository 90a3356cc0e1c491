"""Serializers for the payment API."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.bookings.serializers import LedgerSerializer

from .models import Payment


class PaymentSerializer(serializers.ModelSerializer):
    booking_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "booking_id",
            "amount",
            "currency",
            "status",
            "method",
            "reference",
            "notes",
            "paid_at",
            "confirmed_at",
            "confirmed_by",
            "created_by",
            "created_at",
        ]
        read_only_fields = fields


class PaymentCreateSerializer(serializers.Serializer):
    """Input for recording a payment against a booking."""

    booking_id = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    currency = serializers.CharField(max_length=3, required=False, allow_null=True)
    method = serializers.ChoiceField(choices=Payment.Method.choices, required=False)
    reference = serializers.CharField(max_length=120, required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class RecordPaymentSerializer(PaymentCreateSerializer):
    paid_at = serializers.DateTimeField(required=False, allow_null=True)


class FailPaymentSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class PaymentOutcomeSerializer(serializers.Serializer):
    payment = PaymentSerializer()
    booking_status = serializers.CharField(source="booking.status")
    ledger = LedgerSerializer(source="snapshot")
