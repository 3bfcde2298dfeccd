"""Unit tests for booking service."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import select

from autodetail.core.exceptions import NotFoundError, ValidationError
from autodetail.models.booking import BookingAddon
from autodetail.models.setting import DEPOSIT_PERCENTAGE_KEY, SiteSetting
from autodetail.schemas.booking import CreateBookingRequest, UpdateBookingRequest
from autodetail.services.booking_service import BookingService, build_payment_link
from autodetail.services.notification_service import NEW_BOOKING, PAYMENT_REMINDER


def _request(booking_date, **overrides):
    data = {
        "customer_name": "Jordan Lee",
        "customer_email": "jordan@example.com",
        "customer_phone": "5550104477",
        "vehicle_type": "sedan",
        "booking_date": booking_date,
        "booking_time": "10:00",
    }
    data.update(overrides)
    return CreateBookingRequest(**data)


@pytest.mark.asyncio
async def test_create_booking_prices_service_and_addons(test_session, service, addon, booking_date, notifications):
    """Sedan full detail plus pet hair: $150 + $25 with a 25% deposit."""
    result = await BookingService(test_session, notifications).create_booking(
        _request(booking_date, service_id=service.id, addon_ids=[addon.id])
    )

    booking = result["booking"]
    assert booking.id is not None
    assert booking.status == "pending"
    assert booking.total_amount == Decimal("175.00")
    assert booking.deposit_amount == Decimal("43.75")
    assert booking.deposit_paid is False
    assert len(booking.payment_token) == 12

    assert result["service_name"] == "Full Detail"
    assert result["addons"] == [{"id": addon.id, "name": "Pet Hair Removal", "price": Decimal("25.00")}]
    assert result["payment_link"] == f"https://detail.test/pay?id={booking.id}&token={booking.payment_token}"

    lines = (await test_session.execute(select(BookingAddon))).scalars().all()
    assert [(line.addon_id, line.price_charged) for line in lines] == [(addon.id, Decimal("25.00"))]

    assert notifications.types() == [NEW_BOOKING]
    assert notifications.sent[0][1]["payment_link"] == result["payment_link"]


@pytest.mark.asyncio
async def test_commercial_vehicle_uses_truck_and_commercial_prices(test_session, service, addon, booking_date):
    result = await BookingService(test_session).create_booking(
        _request(booking_date, vehicle_type="commercial", service_id=service.id, addon_ids=[addon.id])
    )

    assert result["booking"].total_amount == Decimal("265.00")


@pytest.mark.asyncio
async def test_create_booking_from_legacy_package(test_session, package, booking_date):
    result = await BookingService(test_session).create_booking(
        _request(booking_date, vehicle_type="suv", package_id=package.id)
    )

    booking = result["booking"]
    assert booking.package_id == package.id
    assert booking.service_id is None
    assert booking.total_amount == Decimal("240.00")
    assert result["service_name"] == "Showroom Package"


@pytest.mark.asyncio
async def test_service_wins_over_package(test_session, service, package, booking_date):
    result = await BookingService(test_session).create_booking(
        _request(booking_date, service_id=service.id, package_id=package.id)
    )

    assert result["booking"].service_id == service.id
    assert result["booking"].package_id is None


@pytest.mark.asyncio
async def test_inactive_and_unknown_addons_are_ignored(test_session, service, addon, booking_date):
    addon.is_active = False
    await test_session.commit()

    result = await BookingService(test_session).create_booking(
        _request(booking_date, service_id=service.id, addon_ids=[addon.id, 9999])
    )

    assert result["addons"] == []
    assert result["booking"].total_amount == Decimal("150.00")


@pytest.mark.asyncio
async def test_deposit_percentage_comes_from_settings_table(test_session, service, booking_date):
    test_session.add(SiteSetting(key=DEPOSIT_PERCENTAGE_KEY, value="0.5"))
    await test_session.commit()

    result = await BookingService(test_session).create_booking(_request(booking_date, service_id=service.id))

    assert result["booking"].deposit_amount == Decimal("75.00")


@pytest.mark.asyncio
async def test_create_booking_requires_service_or_package(test_session, booking_date):
    with pytest.raises(ValidationError) as exc_info:
        await BookingService(test_session).create_booking(_request(booking_date))

    assert exc_info.value.problem_details["detail"] == "Service or package ID required"


@pytest.mark.asyncio
async def test_create_booking_unknown_service(test_session, booking_date):
    with pytest.raises(NotFoundError):
        await BookingService(test_session).create_booking(_request(booking_date, service_id=404))


@pytest.mark.asyncio
async def test_payment_info_requires_matching_token(test_session, booking):
    service = BookingService(test_session)

    with pytest.raises(ValidationError):
        await service.get_payment_info(booking.id, None)

    with pytest.raises(NotFoundError) as exc_info:
        await service.get_payment_info(booking.id, "000000000000")
    assert exc_info.value.problem_details["detail"] == "Invalid payment link"

    info = await service.get_payment_info(booking.id, booking.payment_token)
    assert info["customer_first_name"] == "Jordan"
    assert info["service_name"] == "Full Detail"
    assert info["remaining_balance"] == Decimal("131.25")


@pytest.mark.asyncio
async def test_update_status_rejects_unknown_status(test_session, booking):
    service = BookingService(test_session)

    with pytest.raises(ValidationError):
        await service.update_status(booking.id, "archived")

    updated = await service.update_status(booking.id, "completed")
    assert updated.status == "completed"


@pytest.mark.asyncio
async def test_update_booking_changes_only_given_fields(test_session, booking):
    updated = await BookingService(test_session).update_booking(
        booking.id,
        UpdateBookingRequest(booking_time="14:30", total_amount=Decimal("200"), vehicle_type="SUV"),
    )

    assert updated.booking_time == "14:30"
    assert updated.total_amount == Decimal("200.00")
    assert updated.vehicle_type == "suv"
    assert updated.deposit_amount == Decimal("43.75")
    assert updated.customer_name == "Jordan Lee"


@pytest.mark.asyncio
async def test_update_booking_validation(test_session, booking):
    service = BookingService(test_session)

    with pytest.raises(ValidationError) as exc_info:
        await service.update_booking(booking.id, UpdateBookingRequest())
    assert exc_info.value.problem_details["detail"] == "No fields to update"

    with pytest.raises(ValidationError) as exc_info:
        await service.update_booking(booking.id, UpdateBookingRequest(deposit_amount=Decimal("500")))
    assert exc_info.value.problem_details["detail"] == "Deposit cannot exceed the total amount"

    with pytest.raises(NotFoundError):
        await service.update_booking(9999, UpdateBookingRequest(notes="x"))


@pytest.mark.asyncio
async def test_update_booking_refuses_to_clear_required_fields(test_session, booking):
    service = BookingService(test_session)

    with pytest.raises(ValidationError) as exc_info:
        await service.update_booking(
            booking.id, UpdateBookingRequest(customer_name=None, booking_date=None, notes="keep")
        )
    assert exc_info.value.problem_details["detail"] == (
        "Required fields cannot be cleared: booking_date, customer_name"
    )

    await test_session.refresh(booking)
    assert booking.customer_name == "Jordan Lee"
    assert booking.notes is None

    updated = await service.update_booking(booking.id, UpdateBookingRequest(address=None))
    assert updated.address is None


@pytest.mark.asyncio
async def test_delete_booking_removes_addon_lines(test_session, booking):
    deleted = await BookingService(test_session).delete_booking(booking.id)

    assert deleted == {"id": booking.id, "customer_name": "Jordan Lee"}
    assert (await test_session.execute(select(BookingAddon))).scalars().all() == []


@pytest.mark.asyncio
async def test_mark_paid_generates_manual_reference(test_session, booking):
    updated = await BookingService(test_session).mark_paid(booking.id)

    assert updated.deposit_paid is True
    assert updated.deposit_payment_id.startswith("MANUAL_")


@pytest.mark.asyncio
async def test_resend_payment_link(test_session, booking, notifications):
    service = BookingService(test_session, notifications)

    link = await service.resend_payment_link(booking.id)

    assert link == build_payment_link(booking.id, booking.payment_token)
    assert notifications.types() == [PAYMENT_REMINDER]

    await service.mark_paid(booking.id, "cash")
    with pytest.raises(ValidationError):
        await service.resend_payment_link(booking.id)


@pytest.mark.asyncio
async def test_stats(test_session, booking):
    service = BookingService(test_session)
    await service.mark_paid(booking.id, "cash")

    stats = await service.get_stats(now=datetime.now(timezone.utc))

    assert stats["total_bookings"] == 1
    assert stats["pending_payments"] == 0
    assert stats["this_month_revenue"] == Decimal("43.75")
    assert stats["status_counts"] == {"pending": 1}
