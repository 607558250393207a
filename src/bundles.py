"""Bundle deal detection for the cart banner.

Offers found here are informational. They are never folded into cart totals.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, Dict, Iterable, List, Optional, Sequence, Tuple

from cart import CartLine
from catalog import ProductSource

MULTI_BUY_QUANTITY = 3
MULTI_BUY_PERCENT = 15


@dataclass(frozen=True)
class BundleOffer:
    name: str
    product_ids: Tuple[str, ...]
    discount_percent: int


@dataclass(frozen=True)
class BundleRule:
    """Fires when every product in ``product_ids`` is somewhere in the cart."""

    name: str
    product_ids: Tuple[str, ...]
    discount_percent: int

    def applies_to(self, present: AbstractSet[str]) -> bool:
        return all(product_id in present for product_id in self.product_ids)

    def offer(self) -> BundleOffer:
        return BundleOffer(name=self.name, product_ids=self.product_ids, discount_percent=self.discount_percent)


DEFAULT_BUNDLE_RULES: Tuple[BundleRule, ...] = (
    BundleRule("Office Setup Bundle - 10% Off", ("prod-001", "prod-002"), 10),
    BundleRule("Complete Workspace Bundle - 15% Off", ("prod-001", "prod-002", "prod-003"), 15),
)


class BundleDetector:
    def __init__(self, catalog: ProductSource, rules: Optional[Sequence[BundleRule]] = None) -> None:
        self._catalog = catalog
        self._rules = tuple(DEFAULT_BUNDLE_RULES if rules is None else rules)

    def detect(self, lines: Iterable[CartLine]) -> List[BundleOffer]:
        quantities: Dict[str, int] = {}
        for line in lines:
            quantities[line.product_id] = quantities.get(line.product_id, 0) + line.quantity

        offers: List[BundleOffer] = []
        for product_id, quantity in quantities.items():
            if quantity < MULTI_BUY_QUANTITY:
                continue
            product = self._catalog.get(product_id)
            if product is None:
                continue
            offers.append(
                BundleOffer(
                    name=f"Buy {MULTI_BUY_QUANTITY}+ {product.name} - Get {MULTI_BUY_PERCENT}% Off",
                    product_ids=(product_id,),
                    discount_percent=MULTI_BUY_PERCENT,
                )
            )

        present = frozenset(quantities)
        offers.extend(rule.offer() for rule in self._rules if rule.applies_to(present))
        return offers
