from __future__ import annotations

import logging
from typing import Iterable, Optional

from .config import TrackerSettings
from .errors import ProviderCloseError
from .models import TrackingResult, TrackingStatus
from .providers import ArasKargo, CargoProvider, supports_close

logger = logging.getLogger(__name__)

ARAS_KARGO = "aras kargo"


class CargoTracker:
    """Looks up carrier integrations by name and forwards tracking queries.

    Usage::

        async with CargoTracker() as tracker:
            result = await tracker.track_aras_kargo("1234567890")
            if result.success:
                print(result.data.status)

    Without ``providers`` the Aras Kargo integration is registered.
    """

    def __init__(
        self,
        providers: Optional[Iterable[CargoProvider]] = None,
        settings: Optional[TrackerSettings] = None,
    ):
        self._providers: dict[str, CargoProvider] = {}
        if providers is None:
            providers = [ArasKargo(settings)]
        for provider in providers:
            self.register_provider(provider)

    def register_provider(self, provider: CargoProvider) -> None:
        key = provider.name.lower()
        if key in self._providers:
            logger.debug("Replacing provider %r", key)
        self._providers[key] = provider

    def get_providers(self) -> list[str]:
        return list(self._providers)

    def get_provider(self, name: str) -> Optional[CargoProvider]:
        return self._providers.get(name.lower())

    async def track_with_provider(self, provider_name: str, tracking_number: str) -> TrackingResult:
        provider = self.get_provider(provider_name)
        if provider is None:
            return TrackingResult.failed(TrackingStatus.ERROR, f"Provider '{provider_name}' not found")
        return await provider.track(tracking_number)

    async def track_aras_kargo(self, tracking_number: str) -> TrackingResult:
        return await self.track_with_provider(ARAS_KARGO, tracking_number)

    async def close(self) -> None:
        """Close every provider that holds resources.

        All providers get their turn even when one fails; the failures are
        raised together afterwards as :class:`ProviderCloseError`.
        """
        errors = []
        for name, provider in self._providers.items():
            if not supports_close(provider):
                continue
            try:
                await provider.close()
            except Exception as exc:
                logger.error("Closing provider %r failed: %s", name, exc)
                errors.append((name, exc))
        if errors:
            raise ProviderCloseError(errors)

    async def __aenter__(self) -> "CargoTracker":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
