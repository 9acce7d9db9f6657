"""
Password hashing, JWT issuance/verification and PII protection.

Tokens carry {id, email, role, type}; access and refresh tokens are signed
with different secrets so one can never be replayed as the other.
"""
from __future__ import annotations

import base64
import hashlib
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
import jwt
from cryptography.fernet import Fernet, InvalidToken

from config import Settings
from utils.errors import AppError, AuthError

JWT_ALGORITHM = "HS256"


def hash_password(password: str, rounds: int = 12) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # malformed stored hash
        return False


def _encode(claims: dict[str, Any], secret: str, expires_in: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload = {**claims, "iat": now, "exp": now + expires_in}
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)


def create_tokens(user_id: str, email: str, role: str, settings: Settings) -> dict[str, str]:
    claims = {"id": user_id, "email": email, "role": role}
    return {
        "accessToken": _encode(
            {**claims, "type": "access"},
            settings.jwt_secret,
            timedelta(minutes=settings.jwt_expires_minutes),
        ),
        "refreshToken": _encode(
            {**claims, "type": "refresh"},
            settings.jwt_refresh_secret,
            timedelta(days=settings.jwt_refresh_expires_days),
        ),
    }


def decode_access_token(token: str, settings: Settings) -> dict[str, Any]:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError as e:
        raise AuthError("Token expired", code="TOKEN_EXPIRED") from e
    except jwt.InvalidTokenError as e:
        raise AuthError("Invalid token", code="INVALID_TOKEN") from e
    if payload.get("type") != "access" or not payload.get("id"):
        raise AuthError("Invalid token", code="INVALID_TOKEN")
    return payload


def decode_refresh_token(token: str, settings: Settings) -> dict[str, Any]:
    try:
        payload = jwt.decode(token, settings.jwt_refresh_secret, algorithms=[JWT_ALGORITHM])
    except jwt.InvalidTokenError as e:
        raise AuthError("Invalid refresh token", code="INVALID_REFRESH_TOKEN") from e
    if payload.get("type") != "refresh" or not payload.get("id"):
        raise AuthError("Invalid refresh token", code="INVALID_REFRESH_TOKEN")
    return payload


def _fernet(passphrase: str) -> Fernet:
    key = base64.urlsafe_b64encode(hashlib.sha256(passphrase.encode("utf-8")).digest())
    return Fernet(key)


def encrypt(text: str, passphrase: str) -> str:
    return _fernet(passphrase).encrypt(text.encode("utf-8")).decode("utf-8")


def decrypt(token: str, passphrase: str) -> str:
    try:
        return _fernet(passphrase).decrypt(token.encode("utf-8")).decode("utf-8")
    except InvalidToken as e:
        raise AppError("Decryption failed", status_code=500, code="DECRYPTION_ERROR") from e


def mask_pan(pan: str) -> str:
    if len(pan) != 10:
        return pan
    return f"{pan[:2]}****{pan[-4:]}"


def mask_aadhaar(aadhaar: str) -> str:
    if len(aadhaar) != 12:
        return aadhaar
    return f"****-****-{aadhaar[-4:]}"


def mask_phone(phone: str) -> str:
    if len(phone) < 10:
        return phone
    return f"******{phone[-4:]}"


def mask_email(email: str) -> str:
    username, sep, domain = email.partition("@")
    if not sep:
        return email
    return f"{username[:3]}***@{domain}"
