import uuid

from sqlalchemy import String

# Opaque string identifiers; UUID4 text fits every backend.
ID_TYPE = String(36)


def new_id() -> str:
    return str(uuid.uuid4())
