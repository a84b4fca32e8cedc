from datetime import datetime, timedelta, timezone

from raffledesk.credentials import PlaintextVerifier
from raffledesk.db.engine import get_sessionmaker, make_engine
from raffledesk.draw.codes import compose_raffle_code
from raffledesk.models import (
    Admin,
    Base,
    Collaborator,
    Company,
    Event,
    Organizer,
    Participant,
    Prize,
    Raffle,
)


def main() -> None:
    """Reset the development database and fill it with one event of sample data.

    Logins created:

    * super-admin ``admin@example.com`` / ``admin``
    * organizer ``organizer@example.com`` / ``organizer`` (code ``ABC``)
    * collaborator check-in with booth code ``BOOTH1`` and personal code ``ANA01``
    """
    engine = make_engine()

    # SQLite cannot drop tables referenced by enforced foreign keys in any order.
    with engine.connect() as conn:
        if engine.dialect.name == "sqlite":
            conn.exec_driver_sql("PRAGMA foreign_keys=OFF")
        Base.metadata.drop_all(bind=conn)
        conn.commit()

    Base.metadata.create_all(engine)
    Session = get_sessionmaker(engine)
    verifier = PlaintextVerifier()

    now = datetime.now(timezone.utc)

    with Session.begin() as session:
        session.add(Admin(email="admin@example.com", password_hash=verifier.hash("admin")))

        organizer = Organizer(
            name="Triade Eventos",
            responsible_name="Marina Lopes",
            email="organizer@example.com",
            password_hash=verifier.hash("organizer"),
            phone="+55 11 99999-0000",
            organizer_code="ABC",
        )
        session.add(organizer)
        session.flush()

        event = Event(
            name="Game Expo 2025",
            date=now + timedelta(days=14),
            details="Three days of tournaments, booths and prize draws.",
            organizer_id=organizer.id,
        )
        session.add(event)
        session.flush()

        main_raffle = Raffle(
            name="4K Monitor",
            quantity=2,
            code=compose_raffle_code(organizer.organizer_code, "promo4k"),
            event_id=event.id,
        )
        headset_raffle = Raffle(
            name="Gaming Headset",
            quantity=1,
            code=compose_raffle_code(organizer.organizer_code, "headset"),
            event_id=event.id,
        )
        session.add_all([main_raffle, headset_raffle])
        session.flush()

        session.add_all(
            [
                Participant(
                    name=f"Guest {n}",
                    email=f"guest{n}@example.com",
                    raffle_id=main_raffle.id,
                )
                for n in range(1, 6)
            ]
        )

        company = Company(name="Pixel Labs", code="booth1", event_id=event.id)
        session.add(company)
        session.flush()

        session.add(Collaborator(name="Ana", code="ana01", company_id=company.id))
        session.add_all(
            [
                Prize(name=name, company_id=company.id)
                for name in ("Sticker pack", "T-shirt", "Mouse pad", "Try again")
            ]
        )

    print("Development database seeded.")


if __name__ == "__main__":
    main()
