from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from apps.bookings.models import Booking
from apps.finances import ledger
from apps.tenants.models import Tenant


class Command(BaseCommand):
    help = 'Recomputes payment status for every booking and reports (or fixes) drift'

    def add_arguments(self, parser):
        parser.add_argument('--tenant', help='Only audit the tenant with this slug')
        parser.add_argument('--fix', action='store_true', help='Write the recomputed status back')

    def handle(self, *args, **options):
        tenants = Tenant.objects.all()
        if options['tenant']:
            tenants = tenants.filter(slug=options['tenant'])
            if not tenants.exists():
                raise CommandError(f"Tenant {options['tenant']!r} not found")

        checked = drifted = 0
        for tenant in tenants:
            for booking_id in Booking.objects.filter(tenant=tenant).values_list('pk', flat=True).iterator():
                with transaction.atomic():
                    booking = Booking.objects.select_for_update().get(pk=booking_id)
                    snapshot = ledger.reconcile(tenant.pk, booking)
                    checked += 1
                    if booking.payment_status == snapshot.payment_status:
                        continue
                    drifted += 1
                    self.stdout.write(
                        self.style.WARNING(
                            f"[{tenant.slug}] booking {booking.pk}: stored {booking.payment_status}, "
                            f"derived {snapshot.payment_status} "
                            f"(bill {snapshot.total_bill}, paid {snapshot.paid_total})"
                        )
                    )
                    if options['fix']:
                        ledger.sync_payment_status(tenant.pk, booking)

        summary = f"Checked {checked} bookings, {drifted} with drift"
        if drifted and options['fix']:
            summary += ', all fixed'
        self.stdout.write(self.style.SUCCESS(summary) if not drifted or options['fix'] else summary)
