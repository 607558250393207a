"""Promo code registry and validation."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Union

from config import StorefrontConfig, config as default_config
from money import format_amount, percent_of


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass(frozen=True)
class PromoCode:
    code: str
    discount_type: DiscountType
    discount_value: Union[int, float]
    valid_until: date
    min_purchase: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.code.strip():
            raise ValueError("Promo code must not be empty")
        object.__setattr__(self, "discount_type", DiscountType(self.discount_type))
        if self.discount_value <= 0:
            raise ValueError(f"Promo {self.code} must have a positive discount value")
        if self.discount_type is DiscountType.PERCENTAGE and self.discount_value > 100:
            raise ValueError(f"Promo {self.code} cannot take more than 100%")
        if self.discount_type is DiscountType.FIXED and self.discount_value != int(self.discount_value):
            raise ValueError(f"Promo {self.code} must take a whole currency amount off")

    @property
    def key(self) -> str:
        return self.code.strip().lower()

    def is_expired(self, today: date) -> bool:
        # The expiry day itself is still valid.
        return today > self.valid_until

    def discount_for(self, cart_total: int) -> int:
        if self.discount_type is DiscountType.PERCENTAGE:
            return percent_of(cart_total, self.discount_value)
        return int(self.discount_value)


@dataclass(frozen=True)
class PromoValidation:
    valid: bool
    discount: int
    message: str
    code: Optional[str] = None


class PromotionService:
    """Looks up promo codes and checks them against a cart total.

    Validation never raises for shopper input: every outcome is a
    ``PromoValidation`` carrying a display message.
    """

    def __init__(
        self,
        codes: Optional[Iterable[PromoCode]] = None,
        today: Callable[[], date] = date.today,
        settings: StorefrontConfig = default_config,
    ) -> None:
        source = default_promo_codes() if codes is None else codes
        self._codes: Dict[str, PromoCode] = {promo.key: promo for promo in source}
        self._today = today
        self._settings = settings

    def find(self, code: str) -> Optional[PromoCode]:
        return self._codes.get(code.strip().lower())

    def validate(self, code: str, cart_total: int) -> PromoValidation:
        promo = self.find(code)
        if promo is None:
            return PromoValidation(valid=False, discount=0, message="Invalid promo code")

        if promo.is_expired(self._today()):
            return PromoValidation(valid=False, discount=0, message="Promo code has expired", code=promo.code)

        if promo.min_purchase and cart_total < promo.min_purchase:
            minimum = format_amount(promo.min_purchase, self._settings.currency_symbol)
            return PromoValidation(
                valid=False,
                discount=0,
                message=f"Minimum purchase of {minimum} required",
                code=promo.code,
            )

        discount = promo.discount_for(cart_total)
        saved = format_amount(discount, self._settings.currency_symbol)
        return PromoValidation(
            valid=True,
            discount=discount,
            message=f"Promo code applied! You saved {saved}",
            code=promo.code,
        )

    def codes(self) -> List[PromoCode]:
        return list(self._codes.values())


def default_promo_codes() -> List[PromoCode]:
    return [
        PromoCode("WELCOME10", DiscountType.PERCENTAGE, 10, date(2026, 12, 31), min_purchase=5000),
        PromoCode("SAVE500", DiscountType.FIXED, 500, date(2026, 6, 30), min_purchase=10000),
        PromoCode("MEGA25", DiscountType.PERCENTAGE, 25, date(2026, 3, 31), min_purchase=25000),
        PromoCode("FLASH1000", DiscountType.FIXED, 1000, date(2026, 2, 15), min_purchase=15000),
    ]
