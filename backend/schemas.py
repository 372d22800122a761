from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from dates import parse_booking_date, parse_day

StatusName = Literal["PENDING", "CONFIRMED", "CANCELLED"]


class BookingCreate(BaseModel):
    date: str
    guests: int = Field(ge=1, le=12)
    name: str = Field(min_length=2, max_length=100)
    email: EmailStr = Field(max_length=100)
    phone: str = Field(min_length=8, max_length=20)
    allergies: Optional[str] = Field(default=None, max_length=500)
    preferences: Optional[str] = Field(default=None, max_length=500)
    notes: Optional[str] = Field(default=None, max_length=1000)
    special_event_id: Optional[int] = None

    @field_validator("date")
    @classmethod
    def validate_date(cls, value: str) -> str:
        parse_booking_date(value)
        return value


class BookingStatusUpdate(BaseModel):
    status: StatusName


class BookingDateUpdate(BaseModel):
    date: str

    @field_validator("date")
    @classmethod
    def validate_date(cls, value: str) -> str:
        parse_booking_date(value)
        return value


class DisabledDayCreate(BaseModel):
    day: str
    reason: Optional[str] = Field(default=None, max_length=200)

    @field_validator("day")
    @classmethod
    def validate_day(cls, value: str) -> str:
        parse_day(value)
        return value
