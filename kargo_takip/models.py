from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Optional


class TrackingStatus(Enum):
    DELIVERED = "TESLİM EDİLDİ"
    IN_TRANSIT = "YOLDA"
    NOT_FOUND = "BULUNAMADI"
    ERROR = "HATA"


@dataclass(frozen=True)
class FailureReason:
    date: str
    reason: str
    description: str


@dataclass(frozen=True)
class MovementInfo:
    date: str
    location: str
    status: str
    description: Optional[str] = None


@dataclass(frozen=True)
class ServiceInfo:
    service_type: str = ""
    sms_notifications: tuple[str, ...] = ()
    additional_services: tuple[str, ...] = ()


@dataclass(frozen=True)
class CargoInfo:
    tracking_number: str
    status: str
    sender_branch: str
    receiver_branch: str
    shipment_date: str
    cargo_type: str
    weight: str
    package_count: str
    waybill_number: str
    payment_type: str
    delivery_date: Optional[str] = None
    recipient: Optional[str] = None
    sender: Optional[str] = None
    delivery_method: Optional[str] = None
    sms_code: Optional[str] = None
    failure_reasons: tuple[FailureReason, ...] = ()
    movements: tuple[MovementInfo, ...] = ()
    service_info: Optional[ServiceInfo] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class TrackingResult:
    """Outcome of a single tracking query.

    ``data`` is only carried by successful results and ``error`` only by
    failed ones. Callers branch on ``success``/``status`` instead of catching
    exceptions.
    """

    success: bool
    status: TrackingStatus
    data: Optional[CargoInfo] = None
    error: Optional[str] = None

    def __post_init__(self) -> None:
        if self.success and self.data is None:
            raise ValueError("successful result requires data")
        if not self.success and self.data is not None:
            raise ValueError("failed result must not carry data")
        if self.success and self.error is not None:
            raise ValueError("successful result must not carry an error")

    @classmethod
    def found(cls, status: TrackingStatus, data: CargoInfo) -> "TrackingResult":
        return cls(success=True, status=status, data=data)

    @classmethod
    def failed(cls, status: TrackingStatus, error: str) -> "TrackingResult":
        return cls(success=False, status=status, error=error)

    def to_dict(self) -> dict:
        out = {"success": self.success, "status": self.status.name}
        if self.data is not None:
            out["data"] = self.data.to_dict()
        if self.error is not None:
            out["error"] = self.error
        return out
