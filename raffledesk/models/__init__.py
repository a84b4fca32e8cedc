from .base import Base

# import models so Alembic/autoloaders can discover mappers
from .admin import Admin  # noqa: F401
from .organizer import Organizer  # noqa: F401
from .event import Event  # noqa: F401
from .raffle import Raffle  # noqa: F401
from .participant import Participant  # noqa: F401
from .company import Collaborator, Company, Prize  # noqa: F401
from .wheel_entry import WheelEntry  # noqa: F401

__all__ = [
    "Base",
    "Admin",
    "Organizer",
    "Event",
    "Raffle",
    "Participant",
    "Company",
    "Collaborator",
    "Prize",
    "WheelEntry",
]
