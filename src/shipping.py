"""Shipping details and delivery charges for checkout."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from config import StorefrontConfig, config as default_config


@dataclass
class Address:
    full_name: str
    email: str
    phone: str
    address: str
    city: str
    state: str
    zip_code: str
    country: str = "Bangladesh"


class ShippingService:
    """Charges a flat rate per method; orders at or above the threshold ship free."""

    def __init__(self, settings: StorefrontConfig = default_config) -> None:
        self._threshold = settings.free_shipping_threshold
        self._rates: Dict[str, int] = {
            "standard": settings.standard_shipping,
            "express": settings.express_shipping,
        }

    def cost(self, order_total: int, method: str = "standard") -> int:
        if not self._is_supported(method):
            raise ValueError(f"Unsupported shipping method: {method}")
        if order_total >= self._threshold:
            return 0
        return self._rates[method]

    def _is_supported(self, method: str) -> bool:
        return method in self._rates

    @property
    def methods(self) -> tuple:
        return tuple(self._rates)
