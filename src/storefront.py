"""Public entry point for the storefront pricing engine."""
from __future__ import annotations

from datetime import date
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from bundles import BundleDetector, BundleOffer, BundleRule
from cart import AppliedPromo, CartCalculator, CartLine, CartSummary
from catalog import CatalogService, Product, Selection, Variant
from compatibility import PartialSelection, asymmetric_exclusions, compatible_options, is_compatible
from config import StorefrontConfig, config as default_config
from inventory import StockLevel, stock_level, stock_message
from pricing import LineQuote, PricingService
from promotions import PromoCode, PromotionService, PromoValidation


class Storefront:
    """Wires the catalog, promo registry and pricing rules together.

    Everything here is synchronous and side-effect free, so one instance can
    be shared by any number of callers.
    """

    def __init__(
        self,
        products: Optional[Iterable[Product]] = None,
        promo_codes: Optional[Iterable[PromoCode]] = None,
        bundle_rules: Optional[Sequence[BundleRule]] = None,
        today: Callable[[], date] = date.today,
        settings: StorefrontConfig = default_config,
    ) -> None:
        self.settings = settings
        self.catalog = CatalogService(products)
        self.promotions = PromotionService(promo_codes, today=today, settings=settings)
        self.pricing = PricingService(self.catalog)
        self.calculator = CartCalculator(self.catalog, self.promotions)
        self.bundles = BundleDetector(self.catalog, bundle_rules)

    def get_product_by_id(self, product_id: str) -> Optional[Product]:
        return self.catalog.get(product_id)

    def check_variant_compatibility(self, variant: Variant, selection: PartialSelection) -> bool:
        return is_compatible(variant, selection)

    def compatible_options(self, product: Product, axis: str, selection: PartialSelection) -> List[Variant]:
        """Variants on ``axis`` of ``product`` that can sit next to ``selection``."""
        return compatible_options(product.variants.for_axis(axis), selection)

    def catalog_warnings(self) -> List[Tuple[str, str, str]]:
        """One-sided exclusions as ``(product_id, declaring_id, excluded_id)``."""
        return [
            (product.id, declaring, excluded)
            for product in self.catalog.all()
            for declaring, excluded in asymmetric_exclusions(product)
        ]

    def calculate_product_price(self, product: Product, selection: Selection, quantity: int = 1) -> int:
        return self.pricing.calculate_product_price(product, selection, quantity)

    def quote(self, product_id: str, selection: Selection, quantity: int = 1) -> Optional[LineQuote]:
        return self.pricing.quote(product_id, selection, quantity)

    def validate_promo_code(self, code: str, cart_total: int) -> PromoValidation:
        return self.promotions.validate(code, cart_total)

    def get_stock_level(self, stock: int) -> StockLevel:
        return stock_level(stock)

    def get_stock_message(self, stock: int) -> str:
        return stock_message(stock)

    def summarize_cart(self, lines: Iterable[CartLine], applied_promo: Optional[AppliedPromo] = None) -> CartSummary:
        return self.calculator.summarize(lines, applied_promo)

    def bundle_offers(self, lines: Iterable[CartLine]) -> List[BundleOffer]:
        return self.bundles.detect(lines)
