import datetime as dt
from typing import Literal
from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationError, field_validator

from .errors import InvalidInput


def _calendar_day(v):
    # JSON carries dates as YYYY-MM-DD strings; numbers would parse as timestamps
    if isinstance(v, dt.date) and not isinstance(v, dt.datetime):
        return v
    if not isinstance(v, str):
        raise ValueError("Date must be a YYYY-MM-DD string.")
    return v


def _whole_number(v):
    if isinstance(v, bool) or isinstance(v, float):
        raise ValueError("Guests must be a whole number.")
    if isinstance(v, str) and not v.strip().isdigit():
        raise ValueError("Guests must be a whole number.")
    return v


class RegisterRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    role: Literal["user", "admin"] = "user"


class LoginRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr
    password: str = Field(..., min_length=1)


class CreateReservationRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    date: dt.date
    time_slot: str = Field(..., alias="timeSlot", pattern=r"^\d{2}:\d{2}$")
    guests: int = Field(..., gt=0)

    @field_validator("date", mode="before")
    @classmethod
    def date_is_string(cls, v):
        return _calendar_day(v)

    @field_validator("guests", mode="before")
    @classmethod
    def guests_is_whole(cls, v):
        return _whole_number(v)


class AvailabilityQuery(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    date: dt.date
    time_slot: str = Field(..., alias="timeSlot", pattern=r"^\d{2}:\d{2}$")
    guests: int = Field(1, gt=0)

    @field_validator("date", mode="before")
    @classmethod
    def date_is_string(cls, v):
        return _calendar_day(v)

    @field_validator("guests", mode="before")
    @classmethod
    def guests_is_whole(cls, v):
        return _whole_number(v)


class AdminReservationQuery(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    date: dt.date | None = None
    status: Literal["confirmed", "cancelled", "completed"] | None = None

    @field_validator("date", mode="before")
    @classmethod
    def date_is_string(cls, v):
        return None if v is None else _calendar_day(v)


class CreateTableRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    table_number: int = Field(..., alias="tableNumber", gt=0)
    capacity: int = Field(..., gt=0)


def parse(model: type[BaseModel], payload):
    """Validates a request payload, turning pydantic errors into InvalidInput."""
    if payload is None:
        raise InvalidInput("Missing or invalid JSON payload.")
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        details = [
            {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        raise InvalidInput("Invalid input.", details=details) from e
