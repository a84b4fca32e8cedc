import random
import unittest
from datetime import datetime, timezone

import requests
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from raffledesk.credentials import PlaintextVerifier
from raffledesk.errors import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    UploadError,
    WheelUnavailableError,
)
from raffledesk.inputs import (
    CollaboratorInput,
    CompanyInput,
    EventInput,
    ImageUpload,
    OrganizerInput,
    ParticipantInput,
    PrizeInput,
    WheelEntryInput,
)
from raffledesk.models import Base, Company, Event, Organizer, Prize
from raffledesk.storage.api import StorageClient
from raffledesk.storage.utils import DEFAULT_IMAGE_URL
from raffledesk.workflows import (
    authenticate_organizer,
    check_in_collaborator,
    create_event_with_raffle,
    find_raffle_by_code,
    register_participant,
    register_wheel_entry,
    save_collaborator,
    save_company,
    save_event,
    save_organizer,
    save_prize,
    spin_company_wheel,
)


class DummyStorage(StorageClient):
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.uploads: list[tuple[str, bytes, str]] = []

    def upload(self, object_path, content, content_type="application/octet-stream"):
        if self.fail:
            raise requests.ConnectionError("storage unreachable")
        self.uploads.append((object_path, content, content_type))
        return f"https://cdn.example.com/{object_path}"


class WorkflowTestCase(unittest.TestCase):
    def setUp(self):
        self.engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(bind=self.engine, future=True, expire_on_commit=False)
        self.now = datetime(2025, 9, 12, 10, 0, tzinfo=timezone.utc)

        with self.Session.begin() as session:
            organizer = Organizer(
                name="Triade",
                email="org@example.com",
                password_hash="secret",
                organizer_code="ABC",
            )
            session.add(organizer)
            session.flush()
            self.organizer_id = organizer.id

    def tearDown(self):
        self.engine.dispose()

    def _raffle(self, session, quantity=2, suffix="promo4k"):
        organizer = session.get(Organizer, self.organizer_id)
        return create_event_with_raffle(
            session,
            organizer,
            event_id=None,
            event_name="Expo",
            raffle_name="Monitor",
            quantity=quantity,
            code_suffix=suffix,
            now=self.now,
        )


class TestCreateEventWithRaffle(WorkflowTestCase):
    def test_code_is_organizer_code_plus_upper_suffix(self):
        with self.Session.begin() as session:
            raffle = self._raffle(session)
            self.assertEqual(raffle.code, "ABCPROMO4K")
            self.assertEqual(raffle.event.name, "Expo")
            self.assertEqual(raffle.event.date, self.now)

    def test_duplicate_code_rejected(self):
        with self.Session.begin() as session:
            raffle = self._raffle(session)
            event_id = raffle.event_id

        with self.Session() as session:
            organizer = session.get(Organizer, self.organizer_id)
            with self.assertRaises(ConflictError) as ctx:
                create_event_with_raffle(
                    session,
                    organizer,
                    event_id=event_id,
                    event_name="",
                    raffle_name="Second",
                    quantity=1,
                    code_suffix="PROMO4K",
                )
            self.assertEqual(ctx.exception.message, "This raffle code is already in use.")

    def test_existing_event_reused(self):
        with self.Session.begin() as session:
            first = self._raffle(session)
            organizer = session.get(Organizer, self.organizer_id)
            second = create_event_with_raffle(
                session,
                organizer,
                event_id=first.event_id,
                event_name="",
                raffle_name="Headset",
                quantity=1,
                code_suffix="hs",
            )
            self.assertEqual(second.event_id, first.event_id)

    def test_missing_fields(self):
        with self.Session() as session:
            organizer = session.get(Organizer, self.organizer_id)
            for kwargs in (
                {"event_name": "", "raffle_name": "R", "quantity": 1, "code_suffix": "x"},
                {"event_name": "E", "raffle_name": "", "quantity": 1, "code_suffix": "x"},
                {"event_name": "E", "raffle_name": "R", "quantity": 0, "code_suffix": "x"},
                {"event_name": "E", "raffle_name": "R", "quantity": 1, "code_suffix": " "},
            ):
                with self.assertRaises(InvalidInputError):
                    create_event_with_raffle(session, organizer, event_id=None, **kwargs)


class TestRegisterParticipant(WorkflowTestCase):
    def test_email_registered_once_per_raffle(self):
        with self.Session.begin() as session:
            raffle = self._raffle(session, quantity=2)
            register_participant(
                session,
                ParticipantInput(raffle_id=raffle.id, name="A", email="a@example.com"),
            )
            with self.assertRaises(ConflictError) as ctx:
                register_participant(
                    session,
                    ParticipantInput(raffle_id=raffle.id, name="A", email=" A@Example.com"),
                )
            self.assertEqual(
                ctx.exception.message, "This email is already registered in this raffle."
            )

    def test_ceiling_reached_blocks_registration(self):
        with self.Session.begin() as session:
            raffle = self._raffle(session, quantity=1)
            winner = register_participant(
                session, ParticipantInput(raffle_id=raffle.id, name="A", email="a@x.com")
            )
            winner.is_winner = True
            session.flush()
            with self.assertRaises(ConflictError) as ctx:
                register_participant(
                    session, ParticipantInput(raffle_id=raffle.id, name="B", email="b@x.com")
                )
            self.assertEqual(
                ctx.exception.message,
                'The raffle "Monitor" has already reached its winner limit.',
            )

    def test_unknown_raffle(self):
        with self.Session() as session:
            with self.assertRaises(NotFoundError):
                register_participant(
                    session, ParticipantInput(raffle_id="missing", name="A", email="a@x.com")
                )


class TestFindRaffleByCode(WorkflowTestCase):
    def test_lookup_is_case_insensitive_for_callers(self):
        with self.Session.begin() as session:
            self._raffle(session)
        with self.Session() as session:
            raffle = find_raffle_by_code(session, " abcpromo4k ")
            self.assertIsNotNone(raffle)
            self.assertEqual(raffle.event.name, "Expo")
            self.assertIsNone(find_raffle_by_code(session, "NOPE"))
            self.assertIsNone(find_raffle_by_code(session, ""))


class TestAuthentication(WorkflowTestCase):
    def test_login_matches_email_case_insensitively(self):
        verifier = PlaintextVerifier()
        with self.Session() as session:
            organizer = authenticate_organizer(session, "ORG@example.com", "secret", verifier)
            self.assertEqual(organizer.id, self.organizer_id)
            with self.assertRaises(ConflictError):
                authenticate_organizer(session, "org@example.com", "wrong", verifier)
            with self.assertRaises(ConflictError):
                authenticate_organizer(session, "who@example.com", "secret", verifier)

    def test_collaborator_check_in_messages(self):
        with self.Session.begin() as session:
            raffle = self._raffle(session)
            company = Company(name="Pixel", code="booth1", event_id=raffle.event_id)
            session.add(company)
            session.flush()
            save_collaborator(
                session,
                company.id,
                CollaboratorInput(name="Ana", code="ana01", photo_url="https://x/ana.png"),
            )

        with self.Session() as session:
            collaborator = check_in_collaborator(session, "BOOTH1", "Ana01")
            self.assertEqual(collaborator.name, "Ana")
            with self.assertRaises(NotFoundError) as ctx:
                check_in_collaborator(session, "nope", "ana01")
            self.assertEqual(ctx.exception.message, "Invalid company / booth code.")
            with self.assertRaises(NotFoundError) as ctx:
                check_in_collaborator(session, "booth1", "zzz")
            self.assertEqual(
                ctx.exception.message,
                "Your personal code is not valid for this company.",
            )


class TestSaves(WorkflowTestCase):
    def test_new_organizer_gets_default_photo_and_credential(self):
        with self.Session.begin() as session:
            organizer = save_organizer(
                session,
                OrganizerInput(name="New", email="New@Example.com", password="pw"),
                verifier=PlaintextVerifier(),
            )
            self.assertEqual(organizer.photo_url, DEFAULT_IMAGE_URL)
            self.assertEqual(organizer.password_hash, "pw")
            self.assertEqual(organizer.email, "new@example.com")

    def test_update_keeps_password_and_photo_when_omitted(self):
        with self.Session.begin() as session:
            organizer = save_organizer(
                session,
                OrganizerInput(name="Renamed"),
                self.organizer_id,
                verifier=PlaintextVerifier(),
            )
            self.assertEqual(organizer.name, "Renamed")
            self.assertEqual(organizer.password_hash, "secret")
            self.assertIsNone(organizer.photo_url)

    def test_image_upload_precedes_write(self):
        storage = DummyStorage()
        with self.Session.begin() as session:
            event = save_event(
                session,
                EventInput(
                    name="Expo",
                    date="2025-10-01T18:00:00Z",
                    organizer_id=self.organizer_id,
                    banner_url=ImageUpload("my banner.png", b"img", "image/png"),
                ),
                storage=storage,
            )
            self.assertEqual(len(storage.uploads), 1)
            path, content, content_type = storage.uploads[0]
            self.assertRegex(path, r"^public/\d+_my_banner\.png$")
            self.assertEqual(event.banner_url, f"https://cdn.example.com/{path}")
            self.assertEqual(event.date, datetime(2025, 10, 1, 18, 0, tzinfo=timezone.utc))

    def test_failed_upload_aborts_save(self):
        with self.Session() as session:
            with self.assertRaises(UploadError):
                save_event(
                    session,
                    EventInput(
                        name="Expo",
                        organizer_id=self.organizer_id,
                        banner_url=ImageUpload("b.png", b"img"),
                    ),
                    storage=DummyStorage(fail=True),
                )
            self.assertEqual(session.query(Event).count(), 0)

    def test_company_needs_existing_event(self):
        with self.Session() as session:
            with self.assertRaises(NotFoundError):
                save_company(session, "missing-event", CompanyInput(name="A", code="b1"))
            self.assertEqual(session.query(Company).count(), 0)

    def test_company_code_must_be_unique(self):
        with self.Session.begin() as session:
            raffle = self._raffle(session)
            event_id = raffle.event_id
            save_company(session, event_id, CompanyInput(name="A", code="b1"))
        with self.Session() as session:
            with self.assertRaises(ConflictError):
                save_company(session, event_id, CompanyInput(name="B", code="B1"))


class TestWheel(WorkflowTestCase):
    def setUp(self):
        super().setUp()
        with self.Session.begin() as session:
            raffle = self._raffle(session)
            company = save_company(
                session, raffle.event_id, CompanyInput(name="Pixel", code="b1")
            )
            self.company_id = company.id

    def test_spin_requires_two_prizes(self):
        with self.Session.begin() as session:
            save_prize(session, self.company_id, PrizeInput(name="Sticker"))
        with self.Session() as session:
            with self.assertRaises(WheelUnavailableError):
                spin_company_wheel(session, self.company_id)

    def test_entry_spins_once(self):
        with self.Session.begin() as session:
            for name in ("Sticker", "Shirt", "Mug"):
                save_prize(session, self.company_id, PrizeInput(name=name))
            entry = register_wheel_entry(
                session,
                self.company_id,
                WheelEntryInput(name="W", email="w@x.com", phone="11 9999"),
            )
            prize, stamped = spin_company_wheel(
                session,
                self.company_id,
                entry_id=entry.id,
                rng=random.Random(7),
                now=self.now,
            )
            self.assertIs(stamped, entry)
            self.assertEqual(entry.prize_name, prize.name)
            self.assertEqual(entry.spun_at, self.now)

            with self.assertRaises(ConflictError):
                spin_company_wheel(session, self.company_id, entry_id=entry.id)

    def test_unknown_company(self):
        with self.Session() as session:
            with self.assertRaises(NotFoundError):
                register_wheel_entry(
                    session, "missing", WheelEntryInput(name="W", email="w@x.com", phone="1")
                )

    def test_prize_rename(self):
        with self.Session.begin() as session:
            prize = save_prize(session, self.company_id, PrizeInput(name="Sticker"))
            renamed = save_prize(
                session, self.company_id, PrizeInput(name="Big sticker"), prize.id
            )
            self.assertIs(renamed, prize)
            self.assertEqual(session.get(Prize, prize.id).name, "Big sticker")


if __name__ == "__main__":
    unittest.main()
