"""
Pruebas de `app/modules/pvz/service.py`.

Cubre el parseo de la ventana de fechas, los valores por defecto de
paginación y la propagación de errores.
"""

from datetime import datetime, timezone

import pytest

from app.core.exceptions import InvalidDateFormatError, NoActiveReceptionError
from app.modules.pvz.schemas import City, ProductType, ReceptionStatus
from app.modules.pvz.service import ZERO_TIME, parse_timestamp


def test_parse_timestamp_accepts_rfc3339_z():
    assert parse_timestamp("startDate", "2025-04-20T15:00:00Z") == datetime(2025, 4, 20, 15, tzinfo=timezone.utc)


def test_parse_timestamp_converts_offset_to_utc():
    parsed = parse_timestamp("endDate", "2025-04-20T18:00:00+03:00")

    assert parsed == datetime(2025, 4, 20, 15, tzinfo=timezone.utc)
    assert parsed.tzinfo == timezone.utc


def test_parse_timestamp_naive_is_utc():
    assert parse_timestamp("startDate", "2025-04-20T15:00:00") == datetime(2025, 4, 20, 15, tzinfo=timezone.utc)


@pytest.mark.parametrize("field, kwargs", [
    ("startDate", {"start_date": "20-04-2025 15:00"}),
    ("endDate", {"end_date": "yesterday"}),
    ("startDate", {"start_date": "0001-01-01T00:00:00+01:00"}),
    ("endDate", {"end_date": "9999-12-31T23:59:59-01:00"}),
])
def test_invalid_dates_name_the_field(service, field, kwargs):
    with pytest.raises(InvalidDateFormatError) as exc_info:
        service.get_pvz_info(**kwargs)

    assert exc_info.value.field == field
    assert field in exc_info.value.message


def test_zero_page_and_limit_use_defaults(service):
    for _ in range(12):
        pvz = service.create_pvz(City.MOSCOW)
        service.open_reception(pvz.id)

    assert len(service.get_pvz_info(page=0, limit=0)) == 10
    assert len(service.get_pvz_info(page=2, limit=0)) == 2
    assert len(service.get_pvz_info(page=0, limit=5)) == 5


def test_missing_start_means_beginning_of_time(service, clock):
    clock.set(datetime(1971, 1, 1, tzinfo=timezone.utc))
    pvz = service.create_pvz(City.KAZAN)
    service.open_reception(pvz.id)
    clock.set(datetime(2025, 1, 1, tzinfo=timezone.utc))

    result = service.get_pvz_info(end_date="2024-01-01T00:00:00Z")

    assert [info.pvz.id for info in result] == [pvz.id]
    assert ZERO_TIME.year == 1


def test_missing_end_means_now(service, clock):
    clock.set(datetime(2030, 1, 1, tzinfo=timezone.utc))
    future = service.create_pvz(City.MOSCOW)
    service.open_reception(future.id)

    clock.set(datetime(2025, 1, 1, tzinfo=timezone.utc))
    present = service.create_pvz(City.KAZAN)
    service.open_reception(present.id)

    result = service.get_pvz_info()

    assert [info.pvz.id for info in result] == [present.id]


def test_lifecycle_errors_propagate_unchanged(service):
    pvz = service.create_pvz(City.SAINT_PETERSBURG)

    with pytest.raises(NoActiveReceptionError):
        service.append_product(pvz.id, ProductType.SHOES)
    with pytest.raises(NoActiveReceptionError):
        service.close_reception(pvz.id)


def test_full_cycle_through_service(service):
    pvz = service.create_pvz(City.KAZAN)
    reception = service.open_reception(pvz.id)
    service.append_product(pvz.id, ProductType.SHOES)
    service.append_product(pvz.id, ProductType.SHOES)
    service.append_product(pvz.id, ProductType.CLOTHES)
    service.remove_last_product(pvz.id)
    closed = service.close_reception(pvz.id)

    result = service.get_pvz_info()

    assert closed.status == ReceptionStatus.CLOSED
    products = result[0].receptions[0].products
    assert result[0].receptions[0].reception.id == reception.id
    assert [p.type for p in products] == [ProductType.SHOES, ProductType.SHOES]


@pytest.mark.parametrize("value", [
    "0001-01-01T00:00:00+01:00",
    "9999-12-31T23:59:59-01:00",
])
def test_parse_timestamp_out_of_range_after_utc_conversion(value):
    with pytest.raises(InvalidDateFormatError) as exc_info:
        parse_timestamp("startDate", value)

    assert exc_info.value.value == value
