from __future__ import annotations

from typing import Protocol

from .model import Task


class GeofenceValidator(Protocol):
    """Checks a check-in position against a geofenced task.

    Implementations raise ValidationError when the position is outside the
    task's area. Called only for tasks with geofencing enabled.
    """

    def validate(self, *, task: Task, latitude: float, longitude: float) -> None:
        raise NotImplementedError


class NoopGeofence(GeofenceValidator):
    """Accepts every position."""

    def validate(self, *, task: Task, latitude: float, longitude: float) -> None:
        return None
