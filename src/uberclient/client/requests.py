"""Request shapes for the Uber API endpoints."""

from __future__ import annotations

from uberclient.query.models import Param, RequestDescription

PRODUCT_ENDPOINT = "products"
PRICE_ENDPOINT = "estimates/price"
TIME_ENDPOINT = "estimates/time"
HISTORY_ENDPOINT = "history"
USER_ENDPOINT = "me"
REQUEST_ENDPOINT = "requests"


def products_request(latitude: float, longitude: float) -> RequestDescription:
    return RequestDescription.of(
        "products",
        Param("latitude", latitude, required=True),
        Param("longitude", longitude, required=True),
    )


def prices_request(
    start_latitude: float,
    start_longitude: float,
    end_latitude: float,
    end_longitude: float,
) -> RequestDescription:
    return RequestDescription.of(
        "prices",
        Param("start_latitude", start_latitude, required=True),
        Param("start_longitude", start_longitude, required=True),
        Param("end_latitude", end_latitude, required=True),
        Param("end_longitude", end_longitude, required=True),
    )


def times_request(
    start_latitude: float,
    start_longitude: float,
    customer_uuid: str = "",
    product_id: str = "",
) -> RequestDescription:
    # customer_uuid and product_id only customize the estimate
    return RequestDescription.of(
        "times",
        Param("start_latitude", start_latitude, required=True),
        Param("start_longitude", start_longitude, required=True),
        Param("customer_uuid", customer_uuid),
        Param("product_id", product_id),
    )


def history_request(offset: int, limit: int) -> RequestDescription:
    return RequestDescription.of(
        "history",
        Param("offset", offset, required=True),
        Param("limit", limit, required=True),
    )


def ride_request(
    product_id: str,
    start_latitude: float,
    start_longitude: float,
    end_latitude: float,
    end_longitude: float,
    surge_confirmation_id: str = "",
) -> RequestDescription:
    return RequestDescription.of(
        "ride",
        Param("product_id", product_id, required=True),
        Param("start_latitude", start_latitude, required=True),
        Param("start_longitude", start_longitude, required=True),
        Param("end_latitude", end_latitude, required=True),
        Param("end_longitude", end_longitude, required=True),
        Param("surge_confirmation_id", surge_confirmation_id),
    )
