from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from hourbook.application.utils.sanitize import (
    MAX_DURATION,
    MIN_DURATION,
    validate_date_key,
    validate_duration,
    validate_time_key,
    validate_user,
)


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class SlotRefSchema(_WireModel):
    date_key: str = Field(alias="dateKey")
    time_key: str = Field(alias="timeKey")

    @field_validator("date_key")
    @classmethod
    def _check_date_key(cls, v: str) -> str:
        return validate_date_key(v)

    @field_validator("time_key")
    @classmethod
    def _check_time_key(cls, v: str) -> str:
        return validate_time_key(v)


class CreateBookingRequestSchema(SlotRefSchema):
    user: str
    duration: int = Field(ge=MIN_DURATION, le=MAX_DURATION)

    @field_validator("user")
    @classmethod
    def _check_user(cls, v: str) -> str:
        return validate_user(v)

    @field_validator("duration", mode="before")
    @classmethod
    def _check_duration(cls, v):
        return validate_duration(v)


class BookingUpdatesSchema(_WireModel):
    user: str | None = None
    duration: int | None = Field(default=None, ge=MIN_DURATION, le=MAX_DURATION)

    @field_validator("user")
    @classmethod
    def _check_user(cls, v: str | None) -> str | None:
        return validate_user(v) if v is not None else None

    @field_validator("duration", mode="before")
    @classmethod
    def _check_duration(cls, v):
        return validate_duration(v) if v is not None else None

    @model_validator(mode="after")
    def _require_a_field(self) -> BookingUpdatesSchema:
        if self.user is None and self.duration is None:
            raise ValueError("updates must include user or duration")
        return self


class UpdateBookingRequestSchema(SlotRefSchema):
    updates: BookingUpdatesSchema


class DeleteBookingRequestSchema(SlotRefSchema):
    pass


class BookingSchema(_WireModel):
    user: str
    duration: int


class CreatedBookingSchema(BookingSchema):
    date_key: str = Field(alias="dateKey")
    time_key: str = Field(alias="timeKey")


class CreateBookingResponseSchema(_WireModel):
    success: bool = True
    booking: CreatedBookingSchema


class UpdateBookingResponseSchema(_WireModel):
    success: bool = True
    booking: BookingSchema


class DeleteBookingResponseSchema(_WireModel):
    success: bool = True


class UserEntrySchema(_WireModel):
    name: str
    key: str


class InstanceConfigSchema(_WireModel):
    slug: str
    title: str
    users: list[UserEntrySchema] = Field(default_factory=list)
    created_at: str | None = Field(default=None, alias="createdAt")
