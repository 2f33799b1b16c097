"""Response models for the Uber API v1.

Field descriptions follow https://developer.uber.com/v1/endpoints. Unknown
keys are ignored so additions on Uber's side don't break decoding, and a JSON
null leaves a field at its default just like a missing key.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class UberModel(BaseModel):
    """Base model for API payloads."""

    model_config = ConfigDict(extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def null_as_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return cls.model_fields[info.field_name].get_default(
                call_default_factory=True
            )
        return value


class Product(UberModel):
    """A specific type of car/service, e.g. UberBLACK."""

    product_id: str = ""
    description: str = ""
    display_name: str = ""
    capacity: int = 0
    # URI of an image of the product
    image: str = ""


class Price(UberModel):
    """A price estimate for one product.

    When surge is active, surge_multiplier is greater than 1 and the
    estimate already includes it.
    """

    product_id: str = ""
    # ISO 4217
    currency_code: str | None = None
    display_name: str = ""
    # Human-readable, e.g. "$23-29"
    estimate: str = ""
    low_estimate: int | None = None
    high_estimate: int | None = None
    surge_multiplier: float = 1.0


class Time(UberModel):
    """Estimated time of arrival for a product, in seconds."""

    product_id: str = ""
    display_name: str = ""
    estimate: int = 0


class Location(UberModel):
    address: str = ""
    latitude: float = 0.0
    longitude: float = 0.0


class Trip(UberModel):
    """A single past trip from the user's activity."""

    uuid: str = ""
    request_time: int = 0
    product_id: str = ""
    status: str = ""
    # Miles
    distance: float = 0.0
    start_time: int = 0
    start_location: Location | None = None
    end_time: int = 0
    end_location: Location | None = None


class UserActivity(UberModel):
    offset: int = 0
    limit: int = 0
    count: int = 0
    history: list[Trip] = Field(default_factory=list)


class User(UberModel):
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    picture: str = ""
    promo_code: str = ""


class Driver(UberModel):
    phone_number: str = ""
    rating: float | None = None
    picture_url: str | None = None
    name: str = ""


class Vehicle(UberModel):
    make: str = ""
    model: str = ""
    license_plate: str = ""
    picture_url: str | None = None


class DriverLocation(UberModel):
    latitude: float = 0.0
    longitude: float = 0.0
    # Degrees clockwise from north
    bearing: int | None = None


class RideRequest(UberModel):
    """Real-time status of a ride requested through the API.

    Driver, vehicle and location stay empty until a driver accepts.
    """

    request_id: str = ""
    # processing, no_drivers_available, accepted, arriving, in_progress,
    # driver_canceled, rider_canceled or completed
    status: str = ""
    vehicle: Vehicle | None = None
    driver: Driver | None = None
    location: DriverLocation | None = None
    # Minutes until the driver arrives
    eta: int | None = None
    surge_multiplier: float | None = None


class RequestMap(UberModel):
    request_id: str = ""
    href: str = ""


class ProductsResponse(UberModel):
    products: list[Product] = Field(default_factory=list)


class PricesResponse(UberModel):
    prices: list[Price] = Field(default_factory=list)


class TimesResponse(UberModel):
    times: list[Time] = Field(default_factory=list)


class APIErrorBody(UberModel):
    """Error body returned by non-auth endpoints."""

    message: str = ""
    code: str = ""
    fields: dict[str, str] = Field(default_factory=dict)
