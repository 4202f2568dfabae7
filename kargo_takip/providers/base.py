from __future__ import annotations

from typing import Any, Protocol

from ..models import TrackingResult


class CargoProvider(Protocol):
    """What a carrier integration has to offer.

    ``track`` must not raise: every failure comes back as a
    ``TrackingResult`` with ``success=False``. A provider holding resources
    may also define an async ``close()``; it is detected with
    :func:`supports_close`, not through inheritance.
    """

    name: str

    async def track(self, tracking_number: str) -> TrackingResult:
        ...


def supports_close(provider: Any) -> bool:
    return callable(getattr(provider, "close", None))
