# backend/checkin/schemas/commons.py
import datetime as dt
from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

SubjectKind = Literal["customer", "child"]
SubjectStatus = Literal["pending", "verified"]


def _as_utc(value: dt.datetime) -> dt.datetime:
    # columns hold naive UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)


# serialized with an explicit offset so clients do not read it as local time
UtcDateTime = Annotated[dt.datetime, AfterValidator(_as_utc)]


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire (both accepted on input)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class OkOut(CamelModel):
    ok: bool = True
