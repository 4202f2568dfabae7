from .aras_kargo import ArasKargo
from .base import CargoProvider, supports_close

__all__ = ["ArasKargo", "CargoProvider", "supports_close"]
