"""Token, hashing and TOTP helpers used by the admin auth flow and payment links."""

import base64
import hashlib
import hmac
import io
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
import pyotp
import qrcode

from .config import settings

JWT_ALGORITHM = "HS256"


def generate_payment_token() -> str:
    """12 hex characters (48 bits) identifying a customer payment link."""
    return secrets.token_hex(6)


def generate_refresh_token() -> str:
    return secrets.token_hex(64)


def hash_token(token: str) -> str:
    """SHA-256 hex digest; refresh tokens are only ever stored hashed."""
    return hashlib.sha256(token.encode()).hexdigest()


def constant_time_equals(a: str | None, b: str | None) -> bool:
    if a is None or b is None:
        return False
    return hmac.compare_digest(a.encode(), b.encode())


def access_token_expiry_label() -> str:
    """Lifetime as returned to the dashboard, e.g. ``15m``."""
    return f"{settings.access_token_minutes}m"


def create_access_token(user_id: int, email: str, role: str) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "email": email,
        "role": role,
        "iat": now,
        "exp": now + timedelta(minutes=settings.access_token_minutes),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and verify an access token. Raises ``jwt.PyJWTError`` on failure."""
    return jwt.decode(token, settings.jwt_secret, algorithms=[JWT_ALGORITHM])


def generate_totp_secret() -> str:
    return pyotp.random_base32()


def verify_totp(secret: str, code: str) -> bool:
    """Accept the current code and one step either side for clock drift."""
    if not secret or not code:
        return False
    return pyotp.TOTP(secret).verify(code.strip(), valid_window=1)


def totp_provisioning_uri(secret: str, email: str) -> str:
    return pyotp.TOTP(secret).provisioning_uri(name=email, issuer_name=settings.business_name)


def qr_code_data_url(data: str) -> str:
    """Render ``data`` as a PNG QR code and return it as a data URL."""
    qr = qrcode.QRCode(version=1, box_size=10, border=4)
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    encoded = base64.b64encode(buffer.getvalue()).decode()
    return f"data:image/png;base64,{encoded}"
