"""Serializers for the booking API."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.guests.repositories import PROFILE_FIELDS

from .models import Booking, BookingCharge, CheckEvent


class LedgerSerializer(serializers.Serializer):
    total_bill = serializers.DecimalField(max_digits=12, decimal_places=2)
    paid_total = serializers.DecimalField(max_digits=12, decimal_places=2)
    outstanding = serializers.DecimalField(max_digits=12, decimal_places=2)
    payment_status = serializers.CharField()
    currency = serializers.CharField()


class BookingChargeSerializer(serializers.ModelSerializer):
    class Meta:
        model = BookingCharge
        fields = ["id", "type", "title", "amount", "currency", "status", "created_by", "created_at"]
        read_only_fields = fields


class CheckEventSerializer(serializers.ModelSerializer):
    class Meta:
        model = CheckEvent
        fields = [
            "id",
            "type",
            "captured_at",
            "captured_by",
            "photo_url",
            "id_doc_url",
            "verification_mode",
            "verification_result",
            "notes",
            "early_checkout",
            "refund_eligible_amount",
            "refund_policy",
            "refund_approved",
            "refund_amount",
            "refund_status",
            "refund_reason",
        ]
        read_only_fields = fields


class BookingSerializer(serializers.ModelSerializer):
    """Booking with its guest snapshot and, when loaded, its ledger."""

    unit_id = serializers.UUIDField(read_only=True)
    unit_name = serializers.ReadOnlyField(source="unit.name")
    guest_id = serializers.UUIDField(read_only=True, allow_null=True)
    ledger = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "unit_id",
            "unit_name",
            "guest_id",
            *PROFILE_FIELDS,
            "check_in",
            "check_out",
            "total_amount",
            "currency",
            "status",
            "payment_status",
            "check_in_notes",
            "checked_in_at",
            "checked_out_at",
            "early_checkout",
            "refund_eligible_amount",
            "refund_policy",
            "refund_approved",
            "refund_amount",
            "refund_status",
            "refund_reason",
            "cancelled_at",
            "cancellation_reason",
            "ledger",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_ledger(self, obj: Booking):  # type: ignore
        snapshot = getattr(obj, "ledger", None)
        if snapshot is None:
            return None
        return LedgerSerializer(snapshot).data


class BookingCreateSerializer(serializers.Serializer):
    unit_id = serializers.UUIDField()
    guest_id = serializers.UUIDField()
    check_in = serializers.DateTimeField()
    check_out = serializers.DateTimeField()
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    currency = serializers.CharField(max_length=3, required=False, allow_null=True)

    def validate(self, attrs):  # type: ignore
        if attrs["check_out"] <= attrs["check_in"]:
            raise serializers.ValidationError({"check_out": "check_out must be after check_in."})
        return attrs


class BookingUpdateSerializer(serializers.Serializer):
    unit_id = serializers.UUIDField(required=False)
    guest_id = serializers.UUIDField(required=False)
    check_in = serializers.DateTimeField(required=False)
    check_out = serializers.DateTimeField(required=False)
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    currency = serializers.CharField(max_length=3, required=False)


class GuestDetailsSerializer(serializers.Serializer):
    guest_name = serializers.CharField(max_length=255, required=False, allow_null=True)
    guest_email = serializers.EmailField(required=False, allow_null=True, allow_blank=True)
    guest_phone = serializers.CharField(max_length=32, required=False, allow_null=True, allow_blank=True)
    guest_address = serializers.CharField(max_length=255, required=False, allow_null=True, allow_blank=True)
    guest_nationality = serializers.CharField(max_length=80, required=False, allow_null=True, allow_blank=True)
    id_type = serializers.CharField(max_length=40, required=False, allow_null=True, allow_blank=True)
    id_number = serializers.CharField(max_length=64, required=False, allow_null=True, allow_blank=True)
    id_issued_by = serializers.CharField(max_length=120, required=False, allow_null=True, allow_blank=True)
    vehicle_plate = serializers.CharField(max_length=20, required=False, allow_null=True, allow_blank=True)


class CheckInSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    guest = GuestDetailsSerializer(required=False)
    update_guest_profile = serializers.BooleanField(required=False, default=False)
    photo_url = serializers.URLField(required=False, allow_blank=True, default="")
    id_doc_url = serializers.URLField(required=False, allow_blank=True, default="")
    verification_mode = serializers.ChoiceField(
        choices=CheckEvent.VerificationMode.choices,
        required=False,
        default=CheckEvent.VerificationMode.MANUAL_REVIEW,
    )


class CheckOutSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    damages_cost = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    damages_notes = serializers.CharField(required=False, allow_blank=True, default="")
    photo_url = serializers.URLField(required=False, allow_blank=True, default="")
    refund_policy = serializers.CharField(max_length=120, required=False, allow_blank=True, default="")
    refund_approved = serializers.BooleanField(required=False, default=False)
    refund_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    refund_reason = serializers.CharField(required=False, allow_blank=True, default="")


class CancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)


class ChargeCreateSerializer(serializers.Serializer):
    type = serializers.ChoiceField(
        choices=[c for c in BookingCharge.Type.choices if c[0] != BookingCharge.Type.ROOM]
    )
    title = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)


class OverstayChargeSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    title = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
