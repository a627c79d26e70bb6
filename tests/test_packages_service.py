import unittest
from unittest.mock import patch

from app.core.exceptions import (
    AlreadyPickedUp, DuplicateTrackingCode, PackageNotFound, RecipientNotFound,
    TrackingNotFoundError, UpstreamError, ValidationError
)
from app.modules.packages.repository import PackagesRepository
from app.modules.packages.schemas import PackageUpdateRequest
from app.modules.packages.service import PackagesService
from app.modules.recipients.schemas import RecipientUpdateRequest
from app.modules.recipients.service import RecipientsService
from app.shared.database.models import AuditLog, Package

from tests.base import USPS_CODE, DatabaseTestCase, FakeNotifier, FakeTrackingClient


class CheckInTests(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        self.recipient = self.create_recipient()
        self.tracking_client = FakeTrackingClient(configured=False)
        self.notifier = FakeNotifier()

    def service(self) -> PackagesService:
        return PackagesService(self.db, self.tracking_client, self.notifier, current_user_id=None)

    async def test_check_in_usps_package_without_carrier_api(self):
        package = await self.service().check_in(USPS_CODE, self.recipient.id)

        self.assertEqual(package.tracking_code, USPS_CODE)
        self.assertEqual(package.carrier, "USPS")
        self.assertEqual(package.status, "Checked In")
        self.assertEqual(package.recipient_name, "Jane Doe")
        self.assertEqual(package.l_number, "L12345")
        self.assertEqual(package.mailbox, "1042")
        self.assertIsNone(package.checkout_date)
        self.assertIsNone(package.carrier_status)
        self.assertEqual(self.tracking_client.calls, [])
        self.assertEqual(self.notifier.sent, [("jdoe@mailroom.edu", USPS_CODE)])

    async def test_check_in_other_carrier(self):
        package = await self.service().check_in("1Z999AA10123456784", self.recipient.id)
        self.assertEqual(package.carrier, "Other")
        self.assertEqual(package.status, "Checked In")

    async def test_check_in_stores_normalized_code(self):
        package = await self.service().check_in("  9400 1118 9922 3197 4284 90 ", self.recipient.id)
        self.assertEqual(package.tracking_code, USPS_CODE)
        self.assertEqual(package.carrier, "USPS")

    async def test_check_in_enriches_when_tracking_configured(self):
        self.tracking_client = FakeTrackingClient(configured=True)
        package = await self.service().check_in(USPS_CODE, self.recipient.id)

        self.assertEqual(self.tracking_client.calls, [USPS_CODE])
        self.assertEqual(package.carrier_status, "Delivered")
        self.assertEqual(package.service_type, "Priority Mail")
        self.assertEqual(package.expected_delivery, "2026-10-20")
        self.assertEqual(package.last_location, "FLORENCE, AL 35630")
        self.assertEqual(package.carrier_data["tracking_number"], USPS_CODE)

    async def test_non_usps_codes_are_never_looked_up(self):
        self.tracking_client = FakeTrackingClient(configured=True)
        await self.service().check_in("1Z999AA10123456784", self.recipient.id)
        self.assertEqual(self.tracking_client.calls, [])

    async def test_enrichment_failures_do_not_block_check_in(self):
        for error in (UpstreamError("boom"), TrackingNotFoundError(USPS_CODE), RuntimeError("bug")):
            with self.subTest(error=type(error).__name__):
                self.tracking_client = FakeTrackingClient(configured=True, error=error)
                package = await self.service().check_in(USPS_CODE, self.recipient.id)
                self.assertEqual(package.status, "Checked In")
                self.assertIsNone(package.carrier_status)
                self.assertEqual(package.carrier_data, {})
                await self.service().delete_package(package.id)

    async def test_notification_failure_does_not_block_check_in(self):
        self.notifier = FakeNotifier(error=RuntimeError("smtp down"))
        package = await self.service().check_in(USPS_CODE, self.recipient.id)
        self.assertEqual(package.status, "Checked In")

    async def test_duplicate_tracking_code(self):
        await self.service().check_in(USPS_CODE, self.recipient.id)

        with self.assertRaises(DuplicateTrackingCode):
            await self.service().check_in(USPS_CODE, self.recipient.id)
        with self.assertRaises(DuplicateTrackingCode):
            await self.service().check_in(USPS_CODE.lower()[:4] + " " + USPS_CODE[4:], self.recipient.id)

        self.assertEqual(self.db.query(Package).count(), 1)

    async def test_duplicate_caught_by_unique_index(self):
        await self.service().check_in(USPS_CODE, self.recipient.id)

        # A concurrent request that passed the pre-check still loses at insert time
        with patch.object(PackagesRepository, "get_package_by_tracking_code", return_value=None):
            with self.assertRaises(DuplicateTrackingCode):
                await self.service().check_in(USPS_CODE, self.recipient.id)

        self.assertEqual(self.db.query(Package).count(), 1)

    async def test_unknown_recipient(self):
        with self.assertRaises(RecipientNotFound):
            await self.service().check_in(USPS_CODE, 9999)
        self.assertEqual(self.db.query(Package).count(), 0)

    async def test_missing_input(self):
        for code in ("", "   ", None):
            with self.subTest(code=code):
                with self.assertRaises(ValidationError):
                    await self.service().check_in(code, self.recipient.id)
        with self.assertRaises(ValidationError):
            await self.service().check_in(USPS_CODE, None)

    async def test_check_in_is_audited(self):
        package = await self.service().check_in(USPS_CODE, self.recipient.id)
        entry = self.db.query(AuditLog).filter(AuditLog.action == "package.check_in").one()
        self.assertEqual(entry.entity_id, package.id)
        self.assertEqual(entry.details["l_number"], "L12345")


class CheckOutTests(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        self.recipient = self.create_recipient()
        self.packages = PackagesService(self.db)

    async def test_check_out_then_second_check_out_fails(self):
        package = await self.packages.check_in(USPS_CODE, self.recipient.id)

        picked_up = await self.packages.check_out(package.id)
        self.assertEqual(picked_up.status, "Picked Up")
        self.assertIsNotNone(picked_up.checkout_date)
        self.assertGreaterEqual(picked_up.checkout_date, picked_up.check_in_date)

        with self.assertRaises(AlreadyPickedUp):
            await self.packages.check_out(package.id)

    async def test_check_out_unknown_package(self):
        with self.assertRaises(PackageNotFound):
            await self.packages.check_out(12345)

    async def test_lost_race_reports_already_picked_up(self):
        package = await self.packages.check_in(USPS_CODE, self.recipient.id)
        with patch.object(PackagesRepository, "checkout_package", return_value=False):
            with self.assertRaises(AlreadyPickedUp):
                await self.packages.check_out(package.id)


class UpdateAndDeleteTests(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        self.recipient = self.create_recipient()
        self.packages = PackagesService(self.db)

    async def test_update_whitelisted_fields(self):
        package = await self.packages.check_in("1Z999AA10123456784", self.recipient.id)
        updated = await self.packages.update_package(
            package.id, PackageUpdateRequest(mailbox="2001", carrier="USPS")
        )
        self.assertEqual(updated.mailbox, "2001")
        self.assertEqual(updated.carrier, "USPS")
        self.assertEqual(updated.recipient_name, "Jane Doe")

    async def test_update_ignores_unknown_fields(self):
        package = await self.packages.check_in(USPS_CODE, self.recipient.id)
        request = PackageUpdateRequest(**{"mailbox": "7", "id": 999, "check_in_date": "2000-01-01"})
        updated = await self.packages.update_package(package.id, request)
        self.assertEqual(updated.id, package.id)
        self.assertEqual(updated.mailbox, "7")
        self.assertNotEqual(updated.check_in_date.year, 2000)

    async def test_update_to_picked_up_stamps_checkout_date(self):
        package = await self.packages.check_in(USPS_CODE, self.recipient.id)
        updated = await self.packages.update_package(package.id, PackageUpdateRequest(status="Picked Up"))
        self.assertEqual(updated.status, "Picked Up")
        self.assertIsNotNone(updated.checkout_date)

    async def test_cannot_reopen_picked_up_package(self):
        package = await self.packages.check_in(USPS_CODE, self.recipient.id)
        await self.packages.check_out(package.id)
        with self.assertRaises(AlreadyPickedUp):
            await self.packages.update_package(package.id, PackageUpdateRequest(status="Checked In"))

    async def test_update_to_existing_tracking_code(self):
        await self.packages.check_in(USPS_CODE, self.recipient.id)
        other = await self.packages.check_in("1Z999AA10123456784", self.recipient.id)
        with self.assertRaises(DuplicateTrackingCode):
            await self.packages.update_package(other.id, PackageUpdateRequest(tracking_code=USPS_CODE))

    async def test_update_null_carrier_keeps_value(self):
        package = await self.packages.check_in(USPS_CODE, self.recipient.id)
        updated = await self.packages.update_package(package.id, PackageUpdateRequest(carrier=None))
        self.assertEqual(updated.carrier, "USPS")

    async def test_update_missing_package(self):
        with self.assertRaises(PackageNotFound):
            await self.packages.update_package(404, PackageUpdateRequest(mailbox="1"))

    async def test_delete_any_state(self):
        package = await self.packages.check_in(USPS_CODE, self.recipient.id)
        package_id = package.id
        await self.packages.check_out(package_id)

        self.assertTrue(await self.packages.delete_package(package_id))
        self.assertFalse(await self.packages.delete_package(package_id))
        with self.assertRaises(PackageNotFound):
            await self.packages.get_package(package_id)


class ListingTests(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        self.jane = self.create_recipient()
        self.john = self.create_recipient(name="John Roe", l_number="L67890", mailbox="2002",
                                          email="jroe@mailroom.edu")
        self.packages = PackagesService(self.db)

    async def test_list_all_newest_first(self):
        first = await self.packages.check_in("PKG-1", self.jane.id)
        second = await self.packages.check_in("PKG-2", self.john.id)
        third = await self.packages.check_in("PKG-3", self.jane.id)

        listed = await self.packages.list_all()
        self.assertEqual([p.id for p in listed], [third.id, second.id, first.id])

    async def test_list_by_recipient_is_isolated(self):
        await self.packages.check_in("PKG-1", self.jane.id)
        await self.packages.check_in("PKG-2", self.john.id)
        await self.packages.check_in("PKG-3", self.jane.id)

        janes = await self.packages.list_by_recipient("L12345")
        self.assertEqual({p.tracking_code for p in janes}, {"PKG-1", "PKG-3"})
        self.assertEqual(await self.packages.list_by_recipient("L00000"), [])

    async def test_snapshot_survives_recipient_edit(self):
        package = await self.packages.check_in("PKG-1", self.jane.id)

        await RecipientsService(self.db).update_recipient(self.jane.id, RecipientUpdateRequest(
            name="Jane Smith", l_number="L12345", type="Student", mailbox="9999",
            email="jsmith@mailroom.edu"
        ))

        package = await self.packages.get_package(package.id)
        self.assertEqual(package.recipient_name, "Jane Doe")
        self.assertEqual(package.mailbox, "1042")

    async def test_stats(self):
        first = await self.packages.check_in(USPS_CODE, self.jane.id)
        await self.packages.check_in("PKG-2", self.john.id)
        await self.packages.check_in("PKG-3", self.jane.id)
        await self.packages.check_out(first.id)

        self.assertEqual(await self.packages.get_stats(), {
            "total_packages": 3,
            "checked_in": 2,
            "picked_up": 1,
            "unique_carriers": 2,
            "unique_recipients": 2,
        })

    async def test_stats_empty(self):
        stats = await self.packages.get_stats()
        self.assertEqual(stats["total_packages"], 0)
        self.assertEqual(stats["checked_in"], 0)


class ResendNotificationTests(DatabaseTestCase):
    async def test_resend_uses_current_recipient_record(self):
        recipient = self.create_recipient()
        notifier = FakeNotifier()
        packages = PackagesService(self.db, notifier=notifier)
        package = await packages.check_in("PKG-1", recipient.id)

        recipient.email = "new@mailroom.edu"
        self.db.commit()

        self.assertTrue(await packages.resend_notification(package.id))
        self.assertEqual(notifier.sent[-1], ("new@mailroom.edu", "PKG-1"))

    async def test_resend_without_recipient(self):
        packages = PackagesService(self.db, notifier=FakeNotifier())
        with self.assertRaises(PackageNotFound):
            await packages.resend_notification(1)


if __name__ == "__main__":
    unittest.main()
