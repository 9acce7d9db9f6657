"""Identifier generators and pagination helpers."""
import math
import random
import uuid
from datetime import datetime, timezone
from typing import Any


def new_id() -> str:
    return str(uuid.uuid4())


def generate_application_number() -> str:
    """APP + yyyymm + 5 random digits."""
    return f"APP{datetime.now(timezone.utc):%Y%m}{random.randint(0, 99_999):05d}"


def generate_loan_number() -> str:
    return f"LN{datetime.now(timezone.utc):%Y%m}{random.randint(0, 99_999):05d}"


def generate_customer_code() -> str:
    return f"CUST{random.randint(0, 999_999):06d}"


def generate_api_key() -> str:
    return f"lms_{uuid.uuid4().hex}"


def pagination_params(page: int | None, limit: int | None) -> tuple[int, int, int]:
    """Clamp page/limit and return (offset, limit, page)."""
    page = max(1, page or 1)
    limit = min(100, max(1, limit or 10))
    return (page - 1) * limit, limit, page


def pagination_meta(total: int, page: int, limit: int) -> dict[str, Any]:
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        "total": total,
        "page": page,
        "limit": limit,
        "totalPages": total_pages,
        "hasNext": page < total_pages,
        "hasPrev": page > 1,
    }


def api_response(data: Any = None, message: str | None = None, **extra: Any) -> dict[str, Any]:
    """Success envelope: {"success": true, "data": ..., "message": ...}."""
    body: dict[str, Any] = {"success": True, "data": data}
    if message:
        body["message"] = message
    body.update(extra)
    return body
