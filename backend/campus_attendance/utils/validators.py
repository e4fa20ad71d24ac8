"""Validation utilities for request payloads."""
import re
from typing import Any, Dict, List, Optional

from campus_attendance.utils.errors import ValidationError

# Largest id an INTEGER primary key column holds on every supported database.
MAX_ID = 2 ** 31 - 1


class Validator:
    """Validation helper class."""

    @staticmethod
    def validate_email(email: str) -> bool:
        """Validate email format."""
        if not email:
            return False
        pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        return bool(re.match(pattern, email))

    @staticmethod
    def require_json(data: Any) -> Dict:
        if not isinstance(data, dict):
            raise ValidationError("Request body must be JSON")
        return data

    @staticmethod
    def validate_required_fields(data: Dict, required_fields: List[str]) -> None:
        """Raise when any required field is missing or empty."""
        missing = [
            field for field in required_fields
            if field not in data or data[field] in (None, '')
        ]
        if missing:
            raise ValidationError(f"Missing required field: {', '.join(missing)}")

    @staticmethod
    def positive_int(value: Any, field: str) -> int:
        """Coerce an id-like value, rejecting booleans, floats and negatives."""
        if isinstance(value, bool):
            raise ValidationError(f"{field} must be an integer")
        try:
            number = int(value)
        except (TypeError, ValueError):
            raise ValidationError(f"{field} must be an integer")
        if isinstance(value, float) and value != number:
            raise ValidationError(f"{field} must be an integer")
        if number < 1:
            raise ValidationError(f"{field} must be positive")
        if number > MAX_ID:
            raise ValidationError(f"{field} is out of range")
        return number

    @staticmethod
    def optional_bool(data: Dict, field: str) -> Optional[bool]:
        if field not in data or data[field] is None:
            return None
        if not isinstance(data[field], bool):
            raise ValidationError(f"{field} must be true or false")
        return data[field]

    @staticmethod
    def optional_string(data: Dict, field: str, max_length: int = 512) -> Optional[str]:
        value = data.get(field)
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValidationError(f"{field} must be a string")
        value = value.strip()
        if len(value) > max_length:
            raise ValidationError(f"{field} is too long")
        return value or None
