"""Route modules for the lukkari_backend server."""

from .calendar_routes import register_calendar_routes
from .health_routes import register_health_routes
from .realization_routes import register_realization_routes

__all__ = [
    "register_calendar_routes",
    "register_health_routes",
    "register_realization_routes",
]
