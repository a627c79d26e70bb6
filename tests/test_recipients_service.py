import unittest

from app.core.exceptions import DuplicateLNumber, HasPendingPackages, RecipientNotFound
from app.modules.packages.service import PackagesService
from app.modules.recipients.schemas import RecipientCreateRequest, RecipientUpdateRequest
from app.modules.recipients.service import RecipientsService
from app.shared.database.models import AuditLog, Recipient

from tests.base import USPS_CODE, DatabaseTestCase


def recipient_request(**overrides) -> RecipientCreateRequest:
    data = {
        "name": "Jane Doe",
        "l_number": "L12345",
        "type": "Student",
        "mailbox": "1042",
        "email": "jdoe@mailroom.edu",
    }
    data.update(overrides)
    return RecipientCreateRequest(**data)


class RecipientsServiceTests(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        self.recipients = RecipientsService(self.db)

    async def test_create_and_lookup(self):
        created = await self.recipients.create_recipient(recipient_request(name="  Jane Doe "))
        self.assertEqual(created.name, "Jane Doe")
        self.assertEqual(created.type, "Student")

        self.assertEqual((await self.recipients.get_recipient(created.id)).l_number, "L12345")
        self.assertEqual((await self.recipients.get_recipient_by_l_number("L12345")).id, created.id)

    async def test_duplicate_l_number(self):
        await self.recipients.create_recipient(recipient_request())
        with self.assertRaises(DuplicateLNumber):
            await self.recipients.create_recipient(recipient_request(name="Someone Else"))
        self.assertEqual(self.db.query(Recipient).count(), 1)

    async def test_missing_recipient(self):
        with self.assertRaises(RecipientNotFound):
            await self.recipients.get_recipient(42)
        with self.assertRaises(RecipientNotFound):
            await self.recipients.get_recipient_by_l_number("L00000")
        with self.assertRaises(RecipientNotFound):
            await self.recipients.delete_recipient(42)

    async def test_list_ordered_by_name(self):
        await self.recipients.create_recipient(recipient_request(name="Zed", l_number="L3"))
        await self.recipients.create_recipient(recipient_request(name="Amy", l_number="L1"))
        await self.recipients.create_recipient(recipient_request(name="Mia", l_number="L2"))

        names = [r.name for r in await self.recipients.get_all_recipients()]
        self.assertEqual(names, ["Amy", "Mia", "Zed"])

    async def test_update_replaces_fields(self):
        created = await self.recipients.create_recipient(recipient_request())
        updated = await self.recipients.update_recipient(created.id, RecipientUpdateRequest(
            name="Jane Smith", l_number="L12345", type="Staff", mailbox="2001",
            email="jsmith@mailroom.edu"
        ))
        self.assertEqual(updated.name, "Jane Smith")
        self.assertEqual(updated.type, "Staff")
        self.assertEqual(updated.mailbox, "2001")

    async def test_update_to_taken_l_number(self):
        await self.recipients.create_recipient(recipient_request(l_number="L1"))
        second = await self.recipients.create_recipient(recipient_request(l_number="L2"))
        with self.assertRaises(DuplicateLNumber):
            await self.recipients.update_recipient(second.id, recipient_request(l_number="L1"))

    async def test_delete_blocked_until_pickup(self):
        recipient = await self.recipients.create_recipient(recipient_request())
        recipient_id = recipient.id
        packages = PackagesService(self.db)
        package = await packages.check_in(USPS_CODE, recipient_id)
        package_id = package.id

        with self.assertRaises(HasPendingPackages) as ctx:
            await self.recipients.delete_recipient(recipient_id)
        self.assertEqual(ctx.exception.pending, 1)
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertIsNotNone(self.db.query(Recipient).filter(Recipient.id == recipient_id).first())

        await packages.check_out(package_id)
        deleted = await self.recipients.delete_recipient(recipient_id)
        self.assertEqual(deleted["l_number"], "L12345")
        self.assertIsNone(self.db.query(Recipient).filter(Recipient.id == recipient_id).first())

        # The package history keeps the snapshot
        package = await packages.get_package(package_id)
        self.assertEqual(package.recipient_name, "Jane Doe")

    async def test_changes_are_audited(self):
        created = await self.recipients.create_recipient(recipient_request())
        await self.recipients.delete_recipient(created.id)

        actions = [a for (a,) in self.db.query(AuditLog.action).order_by(AuditLog.id)]
        self.assertEqual(actions, ["recipient.create", "recipient.delete"])


if __name__ == "__main__":
    unittest.main()
