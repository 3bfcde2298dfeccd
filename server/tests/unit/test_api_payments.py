"""Integration tests for coupon and payment endpoints."""

import pytest

from autodetail.services.notification_service import DEPOSIT_PAID


@pytest.mark.asyncio
async def test_coupon_admin_flow(test_client, admin_headers):
    response = await test_client.post(
        "/api/coupons",
        json={"code": "summer15", "discountType": "percent", "discountValue": 15, "maxUses": 50},
        headers=admin_headers,
    )
    assert response.status_code == 201
    coupon = response.json()
    assert coupon["code"] == "SUMMER15"
    assert coupon["usedCount"] == 0
    assert coupon["isActive"] is True

    response = await test_client.get("/api/coupons", headers=admin_headers)
    assert [c["code"] for c in response.json()] == ["SUMMER15"]

    response = await test_client.patch(f"/api/coupons/{coupon['id']}/toggle", headers=admin_headers)
    assert response.json()["isActive"] is False

    response = await test_client.delete(f"/api/coupons/{coupon['id']}", headers=admin_headers)
    assert response.json()["deleted"] == {"id": coupon["id"], "label": "SUMMER15"}


@pytest.mark.asyncio
async def test_create_coupon_validation_error(test_client, admin_headers):
    response = await test_client.post("/api/coupons", json={"code": "X"}, headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "Code, discount type, and value required"


@pytest.mark.asyncio
async def test_coupon_management_requires_admin(test_client, coupon):
    assert (await test_client.get("/api/coupons")).status_code == 401
    assert (await test_client.post("/api/coupons", json={})).status_code == 401
    assert (await test_client.patch(f"/api/coupons/{coupon.id}/toggle")).status_code == 401


@pytest.mark.asyncio
async def test_validate_coupon_is_public(test_client, coupon):
    response = await test_client.post("/api/coupons/validate", json={"code": "save10", "subtotal": 175})

    assert response.status_code == 200
    assert response.json() == {
        "valid": True,
        "code": "SAVE10",
        "discountType": "percent",
        "discountValue": 10.0,
        "discountAmount": 17.5,
    }


@pytest.mark.asyncio
async def test_validate_unknown_coupon(test_client):
    response = await test_client.post("/api/coupons/validate", json={"code": "NOPE"})

    assert response.status_code == 404
    assert response.json()["detail"] == "Invalid or expired coupon code"


@pytest.mark.asyncio
async def test_apply_coupon(test_client, coupon, booking):
    response = await test_client.post("/api/coupons/apply", json={"code": "SAVE10", "bookingId": booking.id})

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "discountApplied": 17.5,
        "newTotal": 157.5,
        "newDeposit": 39.38,
    }

    response = await test_client.post("/api/coupons/apply", json={"code": "SAVE10", "bookingId": booking.id})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_payment_config(test_client, square_config):
    response = await test_client.get("/api/payments/config")

    assert response.status_code == 200
    assert response.json() == {
        "applicationId": "sandbox-sq0idb-test",
        "locationId": "LOC123",
        "environment": "sandbox",
    }


@pytest.mark.asyncio
async def test_payment_config_unconfigured(test_client):
    response = await test_client.get("/api/payments/config")

    assert response.status_code == 503
    assert response.json()["service"] == "Square"


@pytest.mark.asyncio
async def test_deposit_then_final_payment(test_client, booking, square, notifications):
    body = {"bookingId": booking.id, "token": booking.payment_token, "sourceId": "cnon:card-nonce-ok"}

    response = await test_client.post("/api/payments/deposit", json=body)
    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "paymentId": "sq_payment_1",
        "amountPaid": 43.75,
        "receiptUrl": "https://squareup.com/receipt/preview/sq_payment_1",
        "depositPaid": True,
        "finalPaid": False,
        "remainingBalance": 131.25,
        "bookingStatus": "confirmed",
    }

    response = await test_client.post("/api/payments/final", json=body)
    assert response.status_code == 200
    data = response.json()
    assert data["amountPaid"] == 131.25
    assert data["finalPaid"] is True
    assert data["remainingBalance"] == 0

    assert [charge["amount_money"]["amount"] for charge in square.requests] == [4375, 13125]
    assert notifications.types()[0] == DEPOSIT_PAID


@pytest.mark.asyncio
async def test_coupon_lowers_the_deposit_charged(test_client, booking, coupon, square):
    await test_client.post("/api/coupons/apply", json={"code": "SAVE10", "bookingId": booking.id})

    response = await test_client.post(
        "/api/payments/deposit",
        json={"bookingId": booking.id, "token": booking.payment_token, "sourceId": "cnon:ok"},
    )

    assert response.json()["amountPaid"] == 39.38
    assert square.requests[0]["amount_money"]["amount"] == 3938


@pytest.mark.asyncio
async def test_declined_deposit(test_client, booking, square):
    square.decline("Card declined.")

    response = await test_client.post(
        "/api/payments/deposit",
        json={"bookingId": booking.id, "token": booking.payment_token, "sourceId": "cnon:declined"},
    )

    assert response.status_code == 402
    data = response.json()
    assert data["detail"] == "Card declined."
    assert data["processor_errors"][0]["code"] == "GENERIC_DECLINE"


@pytest.mark.asyncio
async def test_deposit_with_wrong_token(test_client, booking, square):
    response = await test_client.post(
        "/api/payments/deposit",
        json={"bookingId": booking.id, "token": "000000000000", "sourceId": "cnon:ok"},
    )

    assert response.status_code == 404
    assert square.requests == []


@pytest.mark.asyncio
async def test_deposit_without_square(test_app, test_client, booking):
    from autodetail.core.dependencies import get_square_client

    test_app.dependency_overrides[get_square_client] = lambda: None

    response = await test_client.post(
        "/api/payments/deposit",
        json={"bookingId": booking.id, "token": booking.payment_token, "sourceId": "cnon:ok"},
    )

    assert response.status_code == 503
    assert response.json()["detail"] == "Payments are not configured"


def _payment_body(booking):
    return {"bookingId": booking.id, "token": booking.payment_token, "sourceId": "cnon:card-nonce-ok"}


@pytest.mark.asyncio
async def test_final_payment_requires_paid_deposit(test_client, booking, square):
    response = await test_client.post("/api/payments/final", json=_payment_body(booking))

    assert response.status_code == 400
    assert response.json()["detail"] == "Deposit must be paid before the final payment"
    assert square.requests == []


@pytest.mark.asyncio
async def test_payments_are_not_charged_twice(test_client, booking, square):
    body = _payment_body(booking)
    assert (await test_client.post("/api/payments/deposit", json=body)).status_code == 200
    assert (await test_client.post("/api/payments/final", json=body)).status_code == 200

    response = await test_client.post("/api/payments/deposit", json=body)
    assert response.status_code == 400
    assert response.json()["detail"] == "Deposit already paid"

    response = await test_client.post("/api/payments/final", json=body)
    assert response.status_code == 400
    assert response.json()["detail"] == "Final payment already made"

    assert len(square.requests) == 2


@pytest.mark.asyncio
async def test_final_payment_with_nothing_left_to_pay(test_client, test_session, booking, square):
    booking.deposit_amount = booking.total_amount
    booking.deposit_paid = True
    await test_session.commit()

    response = await test_client.post("/api/payments/final", json=_payment_body(booking))

    assert response.status_code == 400
    assert response.json()["detail"] == "No balance remaining for this booking"
    assert square.requests == []


@pytest.mark.asyncio
async def test_square_unreachable(test_client, booking, square):
    square.unreachable()

    response = await test_client.post("/api/payments/deposit", json=_payment_body(booking))

    assert response.status_code == 502
    assert response.headers["content-type"] == "application/problem+json"
    assert response.json()["service"] == "Square"
    assert response.json()["detail"] == "Payment processor unavailable, please try again"

    response = await test_client.get(f"/api/bookings/{booking.id}/payment-info", params={"token": booking.payment_token})
    assert response.json()["depositPaid"] is False
