"""Integration tests for booking and payment API endpoints."""

from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.guests.models import Guest
from apps.properties.models import Property, Unit
from apps.tenants.models import Tenant, TenantSettings


class BookingAPITests(APITestCase):
    """Covers creation, conflicts, the deposit gate and the desk lists."""

    def setUp(self) -> None:
        self.tenant = Tenant.objects.create(name="Harbour Suites", slug="harbour", email="desk@harbour.test")
        TenantSettings.objects.create(tenant=self.tenant, min_deposit_percent=50, default_currency="NGN")
        self.unit = Unit.objects.create(
            tenant=self.tenant,
            property=Property.objects.create(tenant=self.tenant, name="Block A"),
            name="A-101",
            base_price=Decimal("10000.00"),
            currency="NGN",
        )
        self.guest = Guest.objects.create(tenant=self.tenant, full_name="Ada Obi", email="ada@example.com")
        self.user = get_user_model().objects.create_user(username="frontdesk", password="DeskPass123")
        self.client.force_authenticate(self.user)
        self.list_url = reverse("booking-list")

    def _headers(self, tenant_id=None) -> dict[str, str]:
        return {"HTTP_X_TENANT_ID": str(tenant_id or self.tenant.id)}

    def _payload(self, check_in: str = "2030-01-01T12:00:00Z", check_out: str = "2030-01-04T12:00:00Z") -> dict:
        return {
            "unit_id": str(self.unit.id),
            "guest_id": str(self.guest.id),
            "check_in": check_in,
            "check_out": check_out,
        }

    def _create(self, **kwargs) -> dict:
        response = self.client.post(self.list_url, self._payload(**kwargs), format="json", **self._headers())
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        return response.data

    def _pay(self, booking_id, amount: str):
        return self.client.post(
            reverse("payment-list"),
            {"booking_id": str(booking_id), "amount": amount, "method": "CASH"},
            format="json",
            **self._headers(),
        )

    def test_create_booking_returns_ledger(self) -> None:
        data = self._create()

        self.assertEqual(data["status"], Booking.Status.PENDING)
        self.assertEqual(data["payment_status"], Booking.PaymentStatus.UNPAID)
        self.assertEqual(Decimal(data["total_amount"]), Decimal("30000.00"))
        self.assertEqual(Decimal(data["ledger"]["outstanding"]), Decimal("30000.00"))
        self.assertEqual(data["guest_name"], "Ada Obi")

    def test_overlapping_booking_conflicts(self) -> None:
        self._create()

        response = self.client.post(
            self.list_url,
            self._payload("2030-01-02T12:00:00Z", "2030-01-03T12:00:00Z"),
            format="json",
            **self._headers(),
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"]["code"], "UNIT_NOT_AVAILABLE")

    def test_invalid_dates_are_a_validation_error(self) -> None:
        response = self.client.post(
            self.list_url,
            self._payload("2030-01-04T12:00:00Z", "2030-01-01T12:00:00Z"),
            format="json",
            **self._headers(),
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["code"], "VALIDATION_ERROR")

    def test_tenant_header_is_required(self) -> None:
        response = self.client.get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()["error"]["code"], "TENANT_REQUIRED")

        response = self.client.get(self.list_url, HTTP_X_TENANT_ID="not-a-tenant")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.json()["error"]["code"], "TENANT_INVALID")

        self.tenant.status = Tenant.Status.SUSPENDED
        self.tenant.save()
        response = self.client.get(self.list_url, **self._headers())
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.json()["error"]["code"], "TENANT_INACTIVE")

    def test_bookings_are_invisible_to_other_tenants(self) -> None:
        booking = self._create()
        other = Tenant.objects.create(name="Lagoon Lodge", slug="lagoon")

        response = self.client.get(
            reverse("booking-detail", args=[booking["id"]]), **self._headers(other.id)
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["error"]["code"], "BOOKING_NOT_FOUND")

        response = self.client.get(self.list_url, **self._headers(other.id))
        self.assertEqual(response.data, [])

    def test_check_in_enforces_deposit(self) -> None:
        booking = self._create()
        url = reverse("booking-check-in", args=[booking["id"]])

        response = self._pay(booking["id"], "10000.00")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["booking_status"], Booking.Status.CONFIRMED)
        self.assertEqual(response.data["ledger"]["payment_status"], "PARTPAID")

        response = self.client.post(url, {}, format="json", **self._headers())
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"]["code"], "DEPOSIT_REQUIRED")
        self.assertEqual(response.data["error"]["details"]["min_deposit_percent"], 50)

        self._pay(booking["id"], "5000.00")
        response = self.client.post(
            url,
            {"notes": "Early arrival", "guest": {"guest_phone": "+2348012345678"}},
            format="json",
            **self._headers(),
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["status"], Booking.Status.CHECKED_IN)
        self.assertEqual(response.data["guest_phone"], "+2348012345678")

        response = self.client.post(url, {}, format="json", **self._headers())
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"]["code"], "ALREADY_CHECKED_IN")

        events = self.client.get(reverse("booking-check-events", args=[booking["id"]]), **self._headers())
        self.assertEqual([e["type"] for e in events.data], ["CHECK_IN"])

    def test_charges_and_ledger(self) -> None:
        booking = self._create()

        response = self.client.post(
            reverse("booking-charges", args=[booking["id"]]),
            {"type": "EXTRA", "title": "Laundry", "amount": "2500.00"},
            format="json",
            **self._headers(),
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        charge_id = response.data["charge"]["id"]
        self.assertEqual(Decimal(response.data["ledger"]["total_bill"]), Decimal("32500.00"))

        response = self.client.post(
            reverse("booking-void-charge", args=[booking["id"], charge_id]), format="json", **self._headers()
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["charge"]["status"], "VOID")

        response = self.client.get(reverse("booking-ledger", args=[booking["id"]]), **self._headers())
        self.assertEqual(Decimal(response.data["total_bill"]), Decimal("30000.00"))
        self.assertEqual(len(response.data["charges"]), 2)

    def test_pending_payment_confirmation(self) -> None:
        booking = self._create()

        response = self.client.post(
            reverse("payment-pending"),
            {"booking_id": booking["id"], "amount": "30000.00"},
            format="json",
            **self._headers(),
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["booking_status"], Booking.Status.PENDING)
        payment_id = response.data["payment"]["id"]

        url = reverse("payment-confirm", args=[payment_id])
        first = self.client.post(url, format="json", **self._headers())
        second = self.client.post(url, format="json", **self._headers())

        self.assertEqual(first.status_code, status.HTTP_200_OK)
        self.assertEqual(first.data["ledger"], second.data["ledger"])
        self.assertEqual(second.data["ledger"]["payment_status"], "PAID")

        response = self.client.get(reverse("payment-list"), {"booking": booking["id"]}, **self._headers())
        self.assertEqual(len(response.data), 1)

    def test_desk_lists(self) -> None:
        paid = self._create()
        self._pay(paid["id"], "30000.00")
        self.client.post(reverse("booking-check-in", args=[paid["id"]]), {}, format="json", **self._headers())
        owing = self._create(check_in="2030-02-01T12:00:00Z", check_out="2030-02-02T12:00:00Z")

        response = self.client.get(reverse("booking-in-house"), **self._headers())
        self.assertEqual([b["id"] for b in response.data["bookings"]], [paid["id"]])

        response = self.client.get(reverse("booking-outstanding"), **self._headers())
        self.assertEqual([b["id"] for b in response.data["items"]], [owing["id"]])
        self.assertEqual(Decimal(response.data["items"][0]["ledger"]["outstanding"]), Decimal("10000.00"))

        response = self.client.get(self.list_url, {"status": "CHECKED_IN"}, **self._headers())
        self.assertEqual([b["id"] for b in response.data], [paid["id"]])

    def test_delete_booking_without_payments(self) -> None:
        booking = self._create()

        response = self.client.delete(reverse("booking-detail", args=[booking["id"]]), **self._headers())

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Booking.objects.filter(pk=booking["id"]).exists())

    def test_early_check_out_records_refund_decision(self) -> None:
        booking = self._create()
        self._pay(booking["id"], "30000.00")
        self.client.post(reverse("booking-check-in", args=[booking["id"]]), {}, format="json", **self._headers())

        response = self.client.post(
            reverse("booking-check-out", args=[booking["id"]]),
            {
                "refund_policy": "Unused nights",
                "refund_approved": True,
                "refund_amount": "20000.00",
                "refund_reason": "Flight moved",
            },
            format="json",
            **self._headers(),
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertTrue(response.data["early_checkout"])
        self.assertEqual(response.data["refund_status"], "PENDING")
        self.assertEqual(Decimal(response.data["refund_amount"]), Decimal("20000.00"))

        events = self.client.get(reverse("booking-check-events", args=[booking["id"]]), **self._headers())
        check_out = events.data[-1]
        self.assertEqual((check_out["type"], check_out["refund_status"]), ("CHECK_OUT", "PENDING"))
        self.assertEqual(check_out["refund_reason"], "Flight moved")

    def test_list_filters(self) -> None:
        first = self._create()
        self._pay(first["id"], "30000.00")
        second = self._create(check_in="2030-02-01T12:00:00Z", check_out="2030-02-02T12:00:00Z")
        self.client.post(reverse("booking-cancel", args=[second["id"]]), {}, format="json", **self._headers())

        def ids(**params):
            response = self.client.get(self.list_url, params, **self._headers())
            self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
            return [b["id"] for b in response.data]

        self.assertEqual(ids(), [second["id"], first["id"]])
        self.assertEqual(ids(payment_status="PAID"), [first["id"]])
        self.assertEqual(ids(active_only="true"), [first["id"]])
        self.assertEqual(ids(q="a-101", date_from="2030-01-15T00:00:00Z"), [second["id"]])
        self.assertEqual(ids(q="nobody"), [])

    def test_unknown_filter_choice_is_a_validation_error(self) -> None:
        response = self.client.get(self.list_url, {"status": "LOST"}, **self._headers())

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["code"], "VALIDATION_ERROR")
        self.assertIn("status", response.data["error"]["details"])
