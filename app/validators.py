# validators.py
from typing import Any, Dict, Optional, Tuple
from uuid import UUID

from app.config import settings
from app.errors import ForbiddenError, NotFoundError, ValidationError


def parse_id(value: Any, label: str = "id") -> UUID:
    """Parse an entity identifier, raising a validation error when malformed"""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {label}")


def require_text(*values: Optional[str], message: str = "All fields are required") -> None:
    """Reject missing or whitespace-only text fields"""
    if any(value is None or not str(value).strip() for value in values):
        raise ValidationError(message)


def ensure_found(row: Optional[Dict[str, Any]], label: str) -> Dict[str, Any]:
    if row is None:
        raise NotFoundError(f"{label} not found")
    return row


def ensure_owner(row: Dict[str, Any], user_id: Optional[UUID], message: str) -> None:
    """Compare the stored owner reference with the acting user by value"""
    if user_id is None or str(row["owner_id"]) != str(user_id):
        raise ForbiddenError(message)


def paginate(page: int = 1, limit: Optional[int] = None) -> Tuple[int, int]:
    """Return (limit, offset) for a 1-based page"""
    if limit is None:
        limit = settings.default_page_size
    if page < 1:
        raise ValidationError("page must be at least 1")
    if limit < 1 or limit > settings.max_page_size:
        raise ValidationError(f"limit must be between 1 and {settings.max_page_size}")
    return limit, (page - 1) * limit
