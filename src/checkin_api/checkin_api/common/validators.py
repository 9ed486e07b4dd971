from __future__ import annotations

import math
import re
from datetime import datetime, time
from typing import Any, Iterable, Optional

import pytz

from ..core.exceptions import ValidationError

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class FieldErrors:
    """Collects per-field validation failures and raises them together.

    Each check returns the cleaned value (or None when the check failed) so
    callers can validate and normalize in one pass, then call ``raise_if_any``.
    """

    def __init__(self) -> None:
        self._errors: dict[str, list[str]] = {}

    def add(self, field_name: str, reason: str) -> None:
        self._errors.setdefault(field_name, []).append(reason)

    @property
    def errors(self) -> dict[str, list[str]]:
        return {k: list(v) for k, v in self._errors.items()}

    def raise_if_any(self, message: str = "invalid payload") -> None:
        if self._errors:
            raise ValidationError(message, self.errors)

    def require(self, field_name: str, value: Any) -> Optional[str]:
        if value is None or not str(value).strip():
            self.add(field_name, "field is required")
            return None
        return str(value).strip()

    def min_length(self, field_name: str, value: Any, min_len: int) -> Optional[str]:
        text = self.require(field_name, value)
        if text is None:
            return None
        if len(text) < min_len:
            self.add(field_name, f"must be at least {min_len} characters")
            return None
        return text

    def email(self, field_name: str, value: Any) -> Optional[str]:
        text = self.require(field_name, value)
        if text is None:
            return None
        if not _EMAIL_RE.match(text):
            self.add(field_name, "email is invalid format")
            return None
        return text.lower()

    def number(self, field_name: str, value: Any) -> Optional[float]:
        if value is None or isinstance(value, bool):
            self.add(field_name, "field is required")
            return None
        try:
            number = float(value)
        except (TypeError, ValueError):
            self.add(field_name, "must be a number")
            return None
        if not math.isfinite(number):
            self.add(field_name, "must be a finite number")
            return None
        return number

    def _bounded(self, field_name: str, value: Any, limit: float) -> Optional[float]:
        number = self.number(field_name, value)
        if number is None:
            return None
        if not -limit <= number <= limit:
            self.add(field_name, f"must be between -{limit:g} and {limit:g}")
            return None
        return number

    def latitude(self, field_name: str, value: Any) -> Optional[float]:
        return self._bounded(field_name, value, 90)

    def longitude(self, field_name: str, value: Any) -> Optional[float]:
        return self._bounded(field_name, value, 180)

    def non_negative_int(self, field_name: str, value: Any, *, default: int = 0) -> Optional[int]:
        if value is None:
            return default
        try:
            n = int(value)
        except (TypeError, ValueError):
            self.add(field_name, "must be an integer")
            return None
        if n < 0:
            self.add(field_name, "must be at least 0")
            return None
        return n

    def one_of(self, field_name: str, value: Any, choices: Iterable[str]) -> Optional[str]:
        allowed = list(choices)
        text = self.require(field_name, value)
        if text is None:
            return None
        if text not in allowed:
            self.add(field_name, f"must be one of: {', '.join(allowed)}")
            return None
        return text

    def time_of_day(self, field_name: str, value: Any) -> Optional[str]:
        text = self.require(field_name, value)
        if text is None:
            return None
        try:
            parse_time_of_day(text)
        except ValueError:
            self.add(field_name, "must be a time in HH:MM format")
            return None
        return text

    def timezone(self, field_name: str, value: Any) -> Optional[str]:
        text = self.require(field_name, value)
        if text is None:
            return None
        if text not in pytz.all_timezones_set:
            self.add(field_name, "must be a valid IANA timezone")
            return None
        return text

    def days(self, field_name: str, value: Any, choices: Iterable[str]) -> Optional[list[str]]:
        allowed = list(choices)
        if not value or isinstance(value, str):
            self.add(field_name, "must contain at least 1 item")
            return None
        days: list[str] = []
        for item in value:
            name = str(item).strip().capitalize()
            if name not in allowed:
                self.add(field_name, f"must be one of: {', '.join(allowed)}")
                return None
            if name not in days:
                days.append(name)
        return days


def parse_time_of_day(value: str) -> time:
    """Parse an ``HH:MM`` string into a ``datetime.time``."""
    return datetime.strptime(value.strip(), "%H:%M").time()
