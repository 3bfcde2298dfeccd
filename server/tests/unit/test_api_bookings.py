"""Integration tests for the booking endpoints."""

from datetime import date, timedelta

import pytest

from autodetail.services.notification_service import NEW_BOOKING, PAYMENT_REMINDER


@pytest.mark.asyncio
async def test_create_booking_endpoint(test_client, sample_booking_data, notifications):
    """Test the public booking form submission."""
    response = await test_client.post("/api/bookings", json=sample_booking_data)

    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    assert data["totalAmount"] == 175.0
    assert data["depositAmount"] == 43.75
    assert data["addons"] == [{"id": sample_booking_data["addonIds"][0], "name": "Pet Hair Removal", "price": 25.0}]

    booking = data["booking"]
    assert booking["status"] == "pending"
    assert booking["vehicleType"] == "sedan"
    assert booking["serviceName"] == "Full Detail"
    assert booking["depositPaid"] is False
    assert data["paymentLink"] == (
        f"https://detail.test/pay?id={booking['id']}&token={booking['paymentToken']}"
    )
    assert notifications.types() == [NEW_BOOKING]


@pytest.mark.asyncio
async def test_create_booking_invalid_data(test_client, sample_booking_data):
    """Schema errors come back as a 422 problem listing each field."""
    invalid_data = {
        **sample_booking_data,
        "customerEmail": "not-an-email",
        "vehicleType": "boat",
        "bookingDate": (date.today() - timedelta(days=1)).isoformat(),
    }

    response = await test_client.post("/api/bookings", json=invalid_data)

    assert response.status_code == 422
    data = response.json()
    assert data["status"] == 422
    paths = {violation["path"] for violation in data["violations"]}
    assert {"customerEmail", "vehicleType", "bookingDate"} <= paths
    messages = " ".join(violation["message"] for violation in data["violations"])
    assert "Booking date cannot be in the past" in messages


@pytest.mark.asyncio
async def test_create_booking_without_service(test_client, sample_booking_data):
    del sample_booking_data["serviceId"]

    response = await test_client.post("/api/bookings", json=sample_booking_data)

    assert response.status_code == 400
    assert response.json()["detail"] == "Service or package ID required"


@pytest.mark.asyncio
async def test_create_booking_unknown_service(test_client, sample_booking_data):
    sample_booking_data["serviceId"] = 9999

    response = await test_client.post("/api/bookings", json=sample_booking_data)

    assert response.status_code == 404
    assert response.json()["resource_type"] == "service"


@pytest.mark.asyncio
async def test_admin_endpoints_require_token(test_client, booking):
    """Test booking administration without authentication."""
    for method, path in [
        ("GET", "/api/bookings"),
        ("GET", f"/api/bookings/{booking.id}"),
        ("GET", "/api/bookings/stats/summary"),
        ("DELETE", f"/api/bookings/{booking.id}"),
        ("POST", f"/api/bookings/{booking.id}/mark-paid"),
    ]:
        response = await test_client.request(method, path)
        assert response.status_code == 401, path
        assert response.json()["detail"] == "Access token required"
        assert response.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_malformed_tokens_are_rejected(test_client):
    response = await test_client.get("/api/bookings", headers={"Authorization": "Token abc"})
    assert response.json()["detail"] == "Invalid authorization header format"

    response = await test_client.get("/api/bookings", headers={"Authorization": "Bearer not.a.jwt"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid token"


@pytest.mark.asyncio
async def test_list_and_get_bookings(test_client, admin_headers, booking):
    response = await test_client.get("/api/bookings", headers=admin_headers)

    assert response.status_code == 200
    bookings = response.json()
    assert [b["id"] for b in bookings] == [booking.id]
    assert bookings[0]["serviceName"] == "Full Detail"
    assert bookings[0]["customerEmail"] == "jordan@example.com"

    response = await test_client.get(f"/api/bookings/{booking.id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["totalAmount"] == 175.0

    response = await test_client.get("/api/bookings/9999", headers=admin_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_payment_info_needs_token(test_client, booking):
    response = await test_client.get(f"/api/bookings/{booking.id}/payment-info")
    assert response.status_code == 400

    response = await test_client.get(f"/api/bookings/{booking.id}/payment-info", params={"token": "nope"})
    assert response.status_code == 404
    assert response.json()["detail"] == "Invalid payment link"

    response = await test_client.get(
        f"/api/bookings/{booking.id}/payment-info", params={"token": booking.payment_token}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["customerFirstName"] == "Jordan"
    assert data["remainingBalance"] == 131.25
    assert "customerEmail" not in data
    assert "paymentToken" not in data


@pytest.mark.asyncio
async def test_update_status(test_client, admin_headers, booking):
    response = await test_client.patch(
        f"/api/bookings/{booking.id}/status", json={"status": "confirmed"}, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["status"] == "confirmed"

    response = await test_client.patch(
        f"/api/bookings/{booking.id}/status", json={"status": "lost"}, headers=admin_headers
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid status"


@pytest.mark.asyncio
async def test_update_booking(test_client, admin_headers, booking):
    response = await test_client.put(
        f"/api/bookings/{booking.id}",
        json={"bookingTime": "15:00", "notes": "Gate code 4411", "depositAmount": 50},
        headers=admin_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["bookingTime"] == "15:00"
    assert data["notes"] == "Gate code 4411"
    assert data["depositAmount"] == 50.0
    assert data["customerName"] == "Jordan Lee"

    response = await test_client.put(f"/api/bookings/{booking.id}", json={}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "No fields to update"


@pytest.mark.asyncio
async def test_update_booking_rejects_null_for_required_fields(test_client, admin_headers, booking):
    response = await test_client.put(
        f"/api/bookings/{booking.id}",
        json={"customerName": None},
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Required fields cannot be cleared: customer_name"

    response = await test_client.get(f"/api/bookings/{booking.id}", headers=admin_headers)
    assert response.json()["customerName"] == "Jordan Lee"


@pytest.mark.asyncio
async def test_delete_booking(test_client, admin_headers, booking):
    response = await test_client.delete(f"/api/bookings/{booking.id}", headers=admin_headers)

    assert response.status_code == 200
    assert response.json() == {"success": True, "deleted": {"id": booking.id, "customerName": "Jordan Lee"}}

    response = await test_client.delete(f"/api/bookings/{booking.id}", headers=admin_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_mark_paid(test_client, admin_headers, booking):
    response = await test_client.post(
        f"/api/bookings/{booking.id}/mark-paid", json={"paymentId": "CASH-7"}, headers=admin_headers
    )

    assert response.status_code == 200
    data = response.json()["booking"]
    assert data["depositPaid"] is True
    assert data["depositPaymentId"] == "CASH-7"


@pytest.mark.asyncio
async def test_mark_paid_without_body(test_client, admin_headers, booking):
    response = await test_client.post(f"/api/bookings/{booking.id}/mark-paid", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["booking"]["depositPaymentId"].startswith("MANUAL_")


@pytest.mark.asyncio
async def test_resend_link(test_client, admin_headers, booking, notifications):
    response = await test_client.post(f"/api/bookings/{booking.id}/resend-link", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["paymentLink"].endswith(f"token={booking.payment_token}")
    assert notifications.types() == [PAYMENT_REMINDER]


@pytest.mark.asyncio
async def test_stats_summary(test_client, admin_headers, booking):
    response = await test_client.get("/api/bookings/stats/summary", headers=admin_headers)

    assert response.status_code == 200
    assert response.json() == {
        "totalBookings": 1,
        "pendingPayments": 1,
        "thisMonthRevenue": 0.0,
        "statusCounts": {"pending": 1},
    }
