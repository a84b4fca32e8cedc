import unittest

from raffledesk.errors import InvalidInputError, UnknownFieldError
from raffledesk.inputs import (
    CompanyInput,
    CompanySettingsInput,
    EventInput,
    ImageUpload,
    OrganizerInput,
    ParticipantInput,
    WheelEntryInput,
)


class TestOrganizerInput(unittest.TestCase):
    def test_camel_payload_maps_onto_fields(self):
        data = OrganizerInput.from_payload(
            {
                "name": "Triade",
                "responsibleName": "Marina",
                "email": "m@example.com",
                "organizerCode": "ABC",
                "password": "pw",
                "confirmPassword": "pw",
            }
        )
        self.assertEqual(data.responsible_name, "Marina")
        self.assertEqual(data.organizer_code, "ABC")
        self.assertEqual(data.confirm_password, "pw")

    def test_changes_exclude_credentials(self):
        data = OrganizerInput.from_payload(
            {"name": "Triade", "email": "m@example.com", "password": "pw"}
        )
        self.assertEqual(data.changes(), {"name": "Triade", "email": "m@example.com"})

    def test_password_mismatch(self):
        with self.assertRaises(InvalidInputError) as ctx:
            OrganizerInput.from_payload(
                {
                    "name": "Triade",
                    "email": "m@example.com",
                    "password": "pw",
                    "confirmPassword": "other",
                }
            )
        self.assertEqual(ctx.exception.message, "Passwords do not match.")

    def test_unknown_field_rejected(self):
        with self.assertRaises(UnknownFieldError) as ctx:
            OrganizerInput.from_payload(
                {"name": "x", "email": "y", "password": "z", "isAdmin": True}
            )
        self.assertEqual(ctx.exception.fields, ["is_admin"])

    def test_required_fields_only_on_create(self):
        with self.assertRaises(InvalidInputError):
            OrganizerInput.from_payload({"name": "Only name"})
        data = OrganizerInput.from_payload({"name": "Only name"}, partial=True)
        self.assertEqual(data.changes(), {"name": "Only name"})


class TestImageFields(unittest.TestCase):
    def test_upload_or_url_accepted(self):
        upload = ImageUpload("banner.png", b"\x89PNG", "image/png")
        data = EventInput(name="Expo", banner_url=upload)
        self.assertIs(data.image, upload)
        self.assertEqual(EventInput(name="Expo", banner_url="https://x/y.png").image, "https://x/y.png")

    def test_other_types_rejected(self):
        with self.assertRaises(InvalidInputError):
            EventInput(name="Expo", banner_url=b"raw bytes")


class TestOtherInputs(unittest.TestCase):
    def test_company_colors_validated(self):
        data = CompanyInput.from_payload(
            {"name": "Pixel", "code": "b1", "wheelColors": ["#000000"]}
        )
        self.assertEqual(data.wheel_colors, ["#000000"])
        with self.assertRaises(InvalidInputError):
            CompanySettingsInput.from_payload({"wheelColors": []})
        with self.assertRaises(InvalidInputError):
            CompanySettingsInput.from_payload({"wheelColors": "#000000"})

    def test_participant_requires_raffle_name_email(self):
        with self.assertRaises(InvalidInputError):
            ParticipantInput.from_payload({"raffleId": "r1", "name": "A", "email": ""})
        data = ParticipantInput.from_payload(
            {"raffleId": "r1", "name": "A", "email": "a@example.com"}
        )
        self.assertIsNone(data.phone)

    def test_wheel_entry_requires_phone(self):
        with self.assertRaises(InvalidInputError):
            WheelEntryInput.from_payload({"name": "A", "email": "a@example.com"})


if __name__ == "__main__":
    unittest.main()
