from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any

from newsletter.errors import MissingFieldError, ValidationError
from newsletter.models.email import is_email_valid

BIRTH_DAY_FORMAT = "%Y-%m-%d"
ABSENT = "none"
RECORD_FIELDS = ("email", "firstName", "gender", "birthDay", "consent", "newsletterId")


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    # Subscriber chose not to share it.
    NONE = "none"

    @classmethod
    def parse(cls, value: Any) -> Gender:
        """Map a loose string onto a variant; anything unknown becomes NONE."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return cls.NONE
        return cls.NONE


@dataclass(frozen=True)
class Subscriber:
    """A newsletter subscriber.

    Identity is ``(email, birth_day, consent, newsletter_id)``; first name and
    gender are informational and do not take part in equality or hashing.
    """

    email: str
    birth_day: date
    newsletter_id: str
    first_name: str | None = field(default=None, compare=False)
    gender: Gender = field(default=Gender.NONE, compare=False)
    consent: bool = False


def build_subscriber(
    email: str | None,
    birth_day: date | None,
    newsletter_id: str | None,
    first_name: str | None = None,
    gender: Gender = Gender.NONE,
    consent: bool = False,
) -> Subscriber:
    if email is None:
        raise ValidationError("Email can't be null")
    if not is_email_valid(email):
        raise ValidationError(f"Email is not valid: {email!r}")
    if birth_day is None:
        raise ValidationError("Birthday can't be null")
    if not isinstance(birth_day, date):
        raise ValidationError("Birthday must be a date")
    if newsletter_id is None:
        raise ValidationError("NewsletterId can't be null")
    if not isinstance(newsletter_id, str):
        raise ValidationError("NewsletterId must be a string")

    return Subscriber(
        email=email,
        birth_day=birth_day,
        newsletter_id=newsletter_id,
        first_name=first_name,
        gender=Gender.parse(gender),
        consent=bool(consent),
    )


def subscriber_to_record(subscriber: Subscriber) -> dict[str, str]:
    return {
        "email": subscriber.email,
        "firstName": subscriber.first_name if subscriber.first_name is not None else ABSENT,
        "gender": subscriber.gender.value,
        "birthDay": subscriber.birth_day.strftime(BIRTH_DAY_FORMAT),
        "consent": "true" if subscriber.consent else "false",
        "newsletterId": subscriber.newsletter_id,
    }


def _text(record: Mapping[str, Any], key: str) -> str:
    value = record[key]
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string")
    return value


def _parse_birth_day(value: str) -> date:
    try:
        return datetime.strptime(value, BIRTH_DAY_FORMAT).date()
    except ValueError as exc:
        raise ValidationError(f"birthDay must use YYYY-MM-DD, got {value!r}") from exc


def _parse_consent(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() == "true"


def subscriber_from_record(record: Any) -> Subscriber:
    """Build a subscriber from a parsed JSON record.

    All six record keys must be present. Unknown genders fall back to ``none``
    and a ``firstName`` of ``"none"`` means the name was not given.
    """
    if not isinstance(record, Mapping):
        raise ValidationError("Subscriber record must be a JSON object")

    for key in RECORD_FIELDS:
        if record.get(key) is None:
            raise MissingFieldError(key)

    first_name = _text(record, "firstName")
    return build_subscriber(
        email=_text(record, "email"),
        birth_day=_parse_birth_day(_text(record, "birthDay")),
        newsletter_id=_text(record, "newsletterId"),
        first_name=None if first_name == ABSENT else first_name,
        gender=Gender.parse(record["gender"]),
        consent=_parse_consent(record["consent"]),
    )
