"""Shipment tracking for Turkish carriers through their public web pages."""

from .config import TrackerSettings
from .errors import ConfigurationError, KargoTakipError, ProviderCloseError
from .models import CargoInfo, FailureReason, MovementInfo, ServiceInfo, TrackingResult, TrackingStatus
from .providers import ArasKargo, CargoProvider
from .tracker import CargoTracker

__version__ = "1.0.0"

__all__ = [
    "ArasKargo",
    "CargoInfo",
    "CargoProvider",
    "CargoTracker",
    "ConfigurationError",
    "FailureReason",
    "KargoTakipError",
    "MovementInfo",
    "ProviderCloseError",
    "ServiceInfo",
    "TrackerSettings",
    "TrackingResult",
    "TrackingStatus",
]
