"""Live cart state for one shopper session.

Mutations are optimistic: the in-memory state changes first, then the
durable store is written. If the write fails the state is restored from a
snapshot taken before the change, the sync status flips to ``error`` and
the exception propagates to the caller. Successful writes are announced on
the sync channel so other sessions reload from the store.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, List, Optional

from audit import AuditLogger
from bundles import BundleDetector, BundleOffer
from cart import AppliedPromo, CartCalculator, CartLine, CartSummary
from cart_store import CartStore
from promotions import PromotionService, PromoValidation
from sync import CART_UPDATED, SyncChannel

logger = logging.getLogger(__name__)


class SyncStatus(str, Enum):
    IDLE = "idle"
    SYNCING = "syncing"
    SYNCED = "synced"
    ERROR = "error"


@dataclass
class _Snapshot:
    items: List[CartLine]
    saved_for_later: List[CartLine]
    applied_promo: Optional[AppliedPromo]


class CartSession:
    def __init__(
        self,
        store: CartStore,
        calculator: CartCalculator,
        promotions: PromotionService,
        bundles: BundleDetector,
        channel: Optional[SyncChannel] = None,
        audit: Optional[AuditLogger] = None,
    ) -> None:
        self._store = store
        self._calculator = calculator
        self._promotions = promotions
        self._bundles = bundles
        self._channel = channel
        self._audit = audit

        self.items: List[CartLine] = []
        self.saved_for_later: List[CartLine] = []
        self.recently_viewed: List[str] = []
        self.applied_promo: Optional[AppliedPromo] = None
        self.loading = False
        self.error: Optional[str] = None
        self.sync_status = SyncStatus.IDLE

        self._unsubscribe: Optional[Callable[[], None]] = None
        if channel is not None:
            self._unsubscribe = channel.subscribe(self, self._on_remote_change)

    # Loading and sync

    async def load(self) -> None:
        self.loading = True
        try:
            items = await self._store.get_cart()
            saved = await self._store.get_saved_for_later()
            recent = await self._store.get_recently_viewed()
        except Exception as exc:
            self.error = str(exc) or "Failed to load cart"
            self.sync_status = SyncStatus.ERROR
            logger.error("Failed to load cart: %s", exc)
            raise
        finally:
            self.loading = False

        self.items = items
        self.saved_for_later = saved
        self.recently_viewed = recent
        self.sync_status = SyncStatus.SYNCED

    async def _on_remote_change(self, message: str) -> None:
        if message != CART_UPDATED:
            return
        self.sync_status = SyncStatus.SYNCING
        await self.load()

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    # Lookups

    def find(self, item_id: int) -> Optional[CartLine]:
        return next((line for line in self.items if line.id == item_id), None)

    def find_by_key(self, key: str) -> Optional[CartLine]:
        return next((line for line in self.items if line.key == key), None)

    def _require(self, lines: List[CartLine], item_id: int) -> CartLine:
        line = next((line for line in lines if line.id == item_id), None)
        if line is None:
            raise KeyError(f"Unknown cart item: {item_id}")
        return line

    # Cart mutations

    async def add(self, line: CartLine) -> CartLine:
        """Add a configuration, merging into an existing line with the same key."""
        existing = self.find_by_key(line.key)
        if existing is not None and existing.id is not None:
            new_quantity = existing.quantity + line.quantity

            def apply() -> None:
                existing.quantity = new_quantity

            await self._mutate(
                "cart_item_updated",
                existing.key,
                apply,
                lambda: self._store.update_cart_item(existing.id, quantity=new_quantity),
            )
            return existing

        added = line.copy()

        async def persist() -> None:
            added.id = await self._store.add_to_cart(added)

        await self._mutate("cart_item_added", added.key, lambda: self.items.append(added), persist)
        return added

    async def update_quantity(self, item_id: int, quantity: int) -> None:
        if quantity <= 0:
            raise ValueError("Quantity must be positive")
        line = self._require(self.items, item_id)

        def apply() -> None:
            line.quantity = quantity

        await self._mutate(
            "cart_item_updated",
            line.key,
            apply,
            lambda: self._store.update_cart_item(item_id, quantity=quantity),
        )

    async def remove(self, item_id: int) -> None:
        line = self._require(self.items, item_id)

        def apply() -> None:
            self.items = [item for item in self.items if item.id != item_id]

        await self._mutate("cart_item_removed", line.key, apply, lambda: self._store.remove_from_cart(item_id))

    async def remove_by_key(self, key: str) -> None:
        line = self.find_by_key(key)
        if line is None or line.id is None:
            raise KeyError(f"Unknown cart line: {key}")
        await self.remove(line.id)

    async def clear(self) -> None:
        def apply() -> None:
            self.items = []
            self.applied_promo = None

        await self._mutate("cart_cleared", None, apply, self._store.clear_cart)

    async def save_for_later(self, item_id: int) -> CartLine:
        """Move a cart line to the saved-for-later list."""
        line = self._require(self.items, item_id)
        saved = line.copy()
        saved.id = None

        def apply() -> None:
            self.items = [item for item in self.items if item.id != item_id]
            self.saved_for_later.append(saved)

        async def persist() -> None:
            saved.id = await self._store.move_to_saved(item_id)

        await self._mutate("saved_for_later", line.key, apply, persist)
        return saved

    async def move_to_cart(self, saved_id: int) -> CartLine:
        """Move a saved line back into the cart, merging with an identical line."""
        saved = self._require(self.saved_for_later, saved_id)
        existing = self.find_by_key(saved.key)

        if existing is not None and existing.id is not None:
            target = existing
            new_quantity = existing.quantity + saved.quantity

            def apply() -> None:
                self.saved_for_later = [item for item in self.saved_for_later if item.id != saved_id]
                existing.quantity = new_quantity

            async def persist() -> None:
                await self._store.move_to_cart(saved_id, merge_into=existing.id)

        else:
            target = saved.copy()
            target.id = None

            def apply() -> None:
                self.saved_for_later = [item for item in self.saved_for_later if item.id != saved_id]
                self.items.append(target)

            async def persist() -> None:
                target.id = await self._store.move_to_cart(saved_id)

        await self._mutate("moved_to_cart", saved.key, apply, persist)
        return target

    async def view_product(self, product_id: str) -> List[str]:
        try:
            await self._store.add_recently_viewed(product_id)
            self.recently_viewed = await self._store.get_recently_viewed()
        except Exception as exc:
            self.error = str(exc) or "Failed to add to recently viewed"
            logger.error("Failed to record view of %s: %s", product_id, exc)
            raise
        return self.recently_viewed

    # Promo codes

    def apply_promo(self, code: str) -> PromoValidation:
        """Validate ``code`` against the current cart and keep it if it passes.

        A successful code replaces any previously applied one.
        """
        if not code.strip():
            return PromoValidation(valid=False, discount=0, message="Please enter a promo code")

        current = self._calculator.summarize(self.items)
        result = self._promotions.validate(code, current.after_quantity_discount)
        if result.valid:
            self.applied_promo = AppliedPromo(code=code.strip().upper(), discount=result.discount)
            if self._audit is not None:
                self._audit.log("promo_applied", self.applied_promo.code, f"discount={result.discount}")
        return result

    def remove_promo(self) -> None:
        self.applied_promo = None

    # Derived values

    def summary(self) -> CartSummary:
        return self._calculator.summarize(self.items, self.applied_promo)

    def bundle_offers(self) -> List[BundleOffer]:
        return self._bundles.detect(self.items)

    # Internals

    def _snapshot(self) -> _Snapshot:
        return _Snapshot(
            items=[line.copy() for line in self.items],
            saved_for_later=[line.copy() for line in self.saved_for_later],
            applied_promo=self.applied_promo,
        )

    def _restore(self, snapshot: _Snapshot) -> None:
        self.items = snapshot.items
        self.saved_for_later = snapshot.saved_for_later
        self.applied_promo = snapshot.applied_promo

    async def _mutate(
        self,
        event: str,
        subject: Optional[str],
        apply: Callable[[], None],
        persist: Callable[[], Awaitable[None]],
    ) -> None:
        snapshot = self._snapshot()
        apply()
        try:
            await persist()
        except Exception as exc:
            self._restore(snapshot)
            self.error = str(exc) or f"{event} failed"
            self.sync_status = SyncStatus.ERROR
            logger.error("Cart change %s failed, rolled back: %s", event, exc)
            raise

        self.sync_status = SyncStatus.SYNCED
        if self._audit is not None:
            self._audit.log(event, subject)
        if self._channel is not None:
            await self._channel.publish(CART_UPDATED, sender=self)
