"""Runtime settings for the storefront engine."""
from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class StorefrontConfig:
    # Display
    currency_symbol: str = "৳"

    # Shipping
    free_shipping_threshold: int = 20000
    standard_shipping: int = 100
    express_shipping: int = 300

    # Cart persistence
    database_url: str = "sqlite:///storefront.db"
    recently_viewed_limit: int = 10

    # Checkout
    checkout_delay_seconds: float = 2.0


def load_config() -> StorefrontConfig:
    """Build a config from ``STOREFRONT_*`` environment variables."""
    defaults = StorefrontConfig()
    return StorefrontConfig(
        currency_symbol=os.environ.get("STOREFRONT_CURRENCY_SYMBOL", defaults.currency_symbol),
        free_shipping_threshold=int(
            os.environ.get("STOREFRONT_FREE_SHIPPING_THRESHOLD", defaults.free_shipping_threshold)
        ),
        standard_shipping=int(os.environ.get("STOREFRONT_STANDARD_SHIPPING", defaults.standard_shipping)),
        express_shipping=int(os.environ.get("STOREFRONT_EXPRESS_SHIPPING", defaults.express_shipping)),
        database_url=os.environ.get("STOREFRONT_DATABASE_URL", defaults.database_url),
        recently_viewed_limit=int(
            os.environ.get("STOREFRONT_RECENTLY_VIEWED_LIMIT", defaults.recently_viewed_limit)
        ),
        checkout_delay_seconds=float(
            os.environ.get("STOREFRONT_CHECKOUT_DELAY", defaults.checkout_delay_seconds)
        ),
    )


config = load_config()
