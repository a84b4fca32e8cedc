"""Typed mutation payloads.

Every save operation takes one of these dataclasses instead of a free-form
field bag. Payloads coming from the application are camel-cased; they are
transcoded with :func:`raffledesk.casing.to_snake` and matched against the
dataclass fields, so an unrecognized key fails loudly instead of being sent to
the store.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any, ClassVar, Optional, TypeVar, Union

from .casing import to_snake
from .errors import InvalidInputError, UnknownFieldError


@dataclass(frozen=True)
class ImageUpload:
    """Raw image picked by the user, still to be uploaded to object storage."""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


ImageField = Union[str, ImageUpload, None]

_InputT = TypeVar("_InputT", bound="_MutationInput")


@dataclass
class _MutationInput:
    ENTITY: ClassVar[str] = "record"
    REQUIRED: ClassVar[tuple[str, ...]] = ()
    IMAGE_FIELD: ClassVar[Optional[str]] = None
    # payload keys that survive transcoding untouched (credential keys)
    ALIASES: ClassVar[dict[str, str]] = {}

    @classmethod
    def from_payload(
        cls: type[_InputT], payload: Mapping[str, Any], *, partial: bool = False
    ) -> _InputT:
        """Build the input from a camel-cased payload.

        Parameters
        ----------
        payload : Mapping[str, Any]
            Application payload, e.g. ``{"name": ..., "photoUrl": ...}``.
        partial : bool, default: False
            When ``True`` (updates) required fields may be omitted.

        Raises
        ------
        UnknownFieldError
            If the payload has keys the entity does not define.
        InvalidInputError
            If a required field is missing or a value is malformed.
        """
        data = to_snake(dict(payload))
        data = {cls.ALIASES.get(key, key): value for key, value in data.items()}
        known = {f.name for f in fields(cls)}
        unknown = [key for key in data if key not in known]
        if unknown:
            raise UnknownFieldError(cls.ENTITY, unknown)
        if not partial:
            cls._check_required(data)
        return cls(**data)

    @classmethod
    def _check_required(cls, data: Mapping[str, Any]) -> None:
        missing = [
            name for name in cls.REQUIRED if data.get(name) is None or data.get(name) == ""
        ]
        if missing:
            raise InvalidInputError(
                f"Missing required {cls.ENTITY} field(s): {', '.join(missing)}."
            )

    def __post_init__(self) -> None:
        if self.IMAGE_FIELD is not None:
            image = getattr(self, self.IMAGE_FIELD)
            if image is not None and not isinstance(image, (str, ImageUpload)):
                raise InvalidInputError(
                    f"{self.IMAGE_FIELD} must be a URL string or an ImageUpload."
                )

    @property
    def image(self) -> ImageField:
        return getattr(self, self.IMAGE_FIELD) if self.IMAGE_FIELD else None

    def changes(self) -> dict[str, Any]:
        """Fields that were supplied, keyed by column name."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


@dataclass
class OrganizerInput(_MutationInput):
    ENTITY: ClassVar[str] = "organizer"
    REQUIRED: ClassVar[tuple[str, ...]] = ("name", "email", "password")
    IMAGE_FIELD: ClassVar[Optional[str]] = "photo_url"
    ALIASES: ClassVar[dict[str, str]] = {"confirmPassword": "confirm_password"}

    name: Optional[str] = None
    responsible_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    photo_url: ImageField = None
    organizer_code: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = None

    def __post_init__(self) -> None:
        super().__post_init__()
        if (
            self.password is not None
            and self.confirm_password is not None
            and self.password != self.confirm_password
        ):
            raise InvalidInputError("Passwords do not match.")

    def changes(self) -> dict[str, Any]:
        # credentials are written separately as password_hash
        data = super().changes()
        data.pop("password", None)
        data.pop("confirm_password", None)
        return data


@dataclass
class EventInput(_MutationInput):
    ENTITY: ClassVar[str] = "event"
    REQUIRED: ClassVar[tuple[str, ...]] = ("name",)
    IMAGE_FIELD: ClassVar[Optional[str]] = "banner_url"

    name: Optional[str] = None
    date: Union[str, datetime, None] = None
    details: Optional[str] = None
    banner_url: ImageField = None
    organizer_id: Optional[str] = None


@dataclass
class CompanyInput(_MutationInput):
    ENTITY: ClassVar[str] = "company"
    REQUIRED: ClassVar[tuple[str, ...]] = ("name", "code")
    IMAGE_FIELD: ClassVar[Optional[str]] = "logo_url"

    name: Optional[str] = None
    logo_url: ImageField = None
    code: Optional[str] = None
    wheel_colors: Optional[list[str]] = None

    def __post_init__(self) -> None:
        super().__post_init__()
        _check_colors(self.wheel_colors)


@dataclass
class CompanySettingsInput(_MutationInput):
    ENTITY: ClassVar[str] = "company settings"
    REQUIRED: ClassVar[tuple[str, ...]] = ("wheel_colors",)

    wheel_colors: Optional[list[str]] = None

    def __post_init__(self) -> None:
        super().__post_init__()
        _check_colors(self.wheel_colors)


@dataclass
class CollaboratorInput(_MutationInput):
    ENTITY: ClassVar[str] = "collaborator"
    REQUIRED: ClassVar[tuple[str, ...]] = ("name", "code")
    IMAGE_FIELD: ClassVar[Optional[str]] = "photo_url"

    name: Optional[str] = None
    photo_url: ImageField = None
    code: Optional[str] = None


@dataclass
class PrizeInput(_MutationInput):
    ENTITY: ClassVar[str] = "prize"
    REQUIRED: ClassVar[tuple[str, ...]] = ("name",)

    name: Optional[str] = None


@dataclass
class ParticipantInput(_MutationInput):
    ENTITY: ClassVar[str] = "participant"
    REQUIRED: ClassVar[tuple[str, ...]] = ("raffle_id", "name", "email")

    raffle_id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


@dataclass
class WheelEntryInput(_MutationInput):
    ENTITY: ClassVar[str] = "wheel entry"
    REQUIRED: ClassVar[tuple[str, ...]] = ("name", "email", "phone")

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


def _check_colors(colors: Optional[list[str]]) -> None:
    if colors is None:
        return
    if not isinstance(colors, list) or not all(isinstance(c, str) for c in colors):
        raise InvalidInputError("wheel_colors must be a list of colour strings.")
    if not colors:
        raise InvalidInputError("wheel_colors must contain at least one colour.")


__all__ = [
    "CollaboratorInput",
    "CompanyInput",
    "CompanySettingsInput",
    "EventInput",
    "ImageField",
    "ImageUpload",
    "OrganizerInput",
    "ParticipantInput",
    "PrizeInput",
    "WheelEntryInput",
]
