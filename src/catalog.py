"""Product catalog: products, their configurable variants, and lookup."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Protocol, Tuple

AXES = ("color", "material", "size")


@dataclass(frozen=True)
class Variant:
    id: str
    name: str
    price_modifier: int = 0
    stock: int = 0
    hex: Optional[str] = None
    incompatible_with: Optional[Tuple[str, ...]] = None
    image: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Variant id must not be empty")
        if self.stock < 0:
            raise ValueError(f"Variant {self.id} has negative stock")
        if self.incompatible_with is not None:
            object.__setattr__(self, "incompatible_with", tuple(self.incompatible_with))


@dataclass(frozen=True)
class ProductVariants:
    colors: Tuple[Variant, ...] = ()
    materials: Tuple[Variant, ...] = ()
    sizes: Tuple[Variant, ...] = ()

    def __post_init__(self) -> None:
        for axis in ("colors", "materials", "sizes"):
            object.__setattr__(self, axis, tuple(getattr(self, axis)))

    def for_axis(self, axis: str) -> Tuple[Variant, ...]:
        return {"color": self.colors, "material": self.materials, "size": self.sizes}[axis]


@dataclass(frozen=True)
class Selection:
    """One chosen variant id per axis."""

    color: str
    material: str
    size: str

    def as_dict(self) -> Dict[str, str]:
        return {"color": self.color, "material": self.material, "size": self.size}

    def ids(self) -> List[str]:
        return [self.color, self.material, self.size]


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    base_price: int
    variants: ProductVariants
    description: str = ""
    rating: float = 0.0
    review_count: int = 0
    images: Tuple[str, ...] = ()
    category: Optional[str] = None
    brand: Optional[str] = None
    model_url: Optional[str] = None
    bundle_eligible: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Product id must not be empty")
        object.__setattr__(self, "images", tuple(self.images))
        object.__setattr__(self, "bundle_eligible", tuple(self.bundle_eligible))

    def variant(self, axis: str, variant_id: str) -> Optional[Variant]:
        return find_variant(self.variants.for_axis(axis), variant_id)

    def selected_variants(self, selection: Selection) -> Dict[str, Optional[Variant]]:
        """Resolve each axis of ``selection``; unknown ids map to ``None``."""
        return {axis: self.variant(axis, variant_id) for axis, variant_id in selection.as_dict().items()}


def find_variant(variants: Iterable[Variant], variant_id: str) -> Optional[Variant]:
    for variant in variants:
        if variant.id == variant_id:
            return variant
    return None


class ProductSource(Protocol):
    """Read-only product lookup consumed by pricing and cart code."""

    def get(self, product_id: str) -> Optional[Product]:
        ...


class CatalogService:
    def __init__(self, products: Optional[Iterable[Product]] = None) -> None:
        source = default_products() if products is None else products
        self._products: Dict[str, Product] = {}
        for product in source:
            if product.id in self._products:
                raise ValueError(f"Duplicate product id: {product.id}")
            self._products[product.id] = product

    def get(self, product_id: str) -> Optional[Product]:
        # Missing products are a normal outcome for callers, not an error.
        return self._products.get(product_id)

    def all(self) -> List[Product]:
        return list(self._products.values())

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._products

    def __len__(self) -> int:
        return len(self._products)


def default_products() -> List[Product]:
    """Demo catalog the storefront ships with."""
    return [
        Product(
            id="prod-001",
            name="Premium Office Chair",
            description="Ergonomic office chair with 3D lumbar support and adjustable armrests.",
            base_price=15999,
            rating=4.5,
            review_count=234,
            category="Furniture",
            brand="ErgoMax",
            model_url="models/chair/mid_century_lounge_chair_1k.gltf",
            bundle_eligible=("prod-002", "prod-003"),
            variants=ProductVariants(
                colors=(
                    Variant("color-black", "Midnight Black", 0, 45, hex="#1a1a1a"),
                    Variant("color-gray", "Slate Gray", 500, 30, hex="#64748b"),
                    Variant("color-blue", "Ocean Blue", 800, 8, hex="#1e40af", incompatible_with=("material-wood",)),
                    Variant("color-red", "Crimson Red", 1000, 3, hex="#dc2626"),
                ),
                materials=(
                    Variant("material-mesh", "Breathable Mesh", 0, 100),
                    Variant("material-leather", "Premium Leather", 3000, 50),
                    Variant("material-fabric", "Luxury Fabric", 1500, 75, incompatible_with=("color-red",)),
                    Variant("material-wood", "Wood Finish", 2000, 20, incompatible_with=("color-blue",)),
                ),
                sizes=(
                    Variant("size-s", "Small (150-165 cm)", -500, 25),
                    Variant("size-m", "Medium (165-180 cm)", 0, 100),
                    Variant("size-l", "Large (180-195 cm)", 1000, 60),
                    Variant("size-xl", "Extra Large (195+ cm)", 1500, 15),
                ),
            ),
        ),
        Product(
            id="prod-002",
            name="Standing Desk Pro",
            description="Electric height-adjustable standing desk with memory presets.",
            base_price=25999,
            rating=4.8,
            review_count=567,
            category="Furniture",
            brand="DeskMaster",
            model_url="models/desk/small_wooden_table_01_1k.gltf",
            bundle_eligible=("prod-001", "prod-003"),
            variants=ProductVariants(
                colors=(
                    Variant("color-white", "Arctic White", 0, 40, hex="#ffffff"),
                    Variant("color-black", "Carbon Black", 500, 35, hex="#000000"),
                    Variant("color-walnut", "Walnut Brown", 1200, 6, hex="#8b4513"),
                ),
                materials=(
                    Variant("material-laminate", "High-Pressure Laminate", 0, 80),
                    Variant("material-bamboo", "Eco Bamboo", 2500, 30),
                    Variant("material-solid-wood", "Solid Wood", 5000, 15),
                ),
                sizes=(
                    Variant("size-120", "120cm x 60cm", 0, 50),
                    Variant("size-140", "140cm x 70cm", 2000, 45),
                    Variant("size-160", "160cm x 80cm", 4000, 30),
                    Variant("size-180", "180cm x 90cm", 6000, 10),
                ),
            ),
        ),
        Product(
            id="prod-003",
            name="LED Monitor Arm",
            description="Dual monitor arm with gas spring technology, supports screens up to 32 inches.",
            base_price=4999,
            rating=4.6,
            review_count=892,
            category="Accessories",
            brand="MonitorPro",
            model_url="models/Television/Television_01_1k.gltf",
            bundle_eligible=("prod-001", "prod-002"),
            variants=ProductVariants(
                colors=(
                    Variant("color-silver", "Silver", 0, 100, hex="#c0c0c0"),
                    Variant("color-black", "Matte Black", 300, 85, hex="#000000"),
                    Variant("color-white", "Pure White", 300, 4, hex="#ffffff"),
                ),
                materials=(
                    Variant("material-aluminum", "Aluminum Alloy", 0, 150),
                    Variant("material-steel", "Reinforced Steel", 1000, 60),
                ),
                sizes=(
                    Variant("size-single", "Single Monitor", 0, 120),
                    Variant("size-dual", "Dual Monitor", 2000, 80),
                    Variant("size-triple", "Triple Monitor", 4500, 25),
                ),
            ),
        ),
        Product(
            id="prod-004",
            name="Wireless Gaming Headset",
            description="7.1 surround sound wireless headset with RGB lighting and 30-hour battery life.",
            base_price=8999,
            rating=4.7,
            review_count=1234,
            category="Electronics",
            brand="SoundWave",
            model_url="models/headset/boombox_1k.gltf",
            bundle_eligible=("prod-005",),
            variants=ProductVariants(
                colors=(
                    Variant("color-black", "Shadow Black", 0, 200, hex="#000000"),
                    Variant("color-white", "Ghost White", 500, 150, hex="#ffffff"),
                    Variant("color-rgb", "RGB Edition", 1500, 7, hex="#ff00ff", incompatible_with=("material-eco",)),
                ),
                materials=(
                    Variant("material-plastic", "Premium ABS Plastic", 0, 300),
                    Variant("material-metal", "Aluminum Frame", 2000, 100),
                    Variant("material-eco", "Eco-Friendly Composite", 1000, 50, incompatible_with=("color-rgb",)),
                ),
                sizes=(
                    Variant("size-standard", "Standard Fit", 0, 400),
                    Variant("size-large", "Large Ear Cups", 800, 150),
                ),
            ),
        ),
        Product(
            id="prod-005",
            name="Mechanical Keyboard RGB",
            description="Hot-swappable mechanical keyboard with Cherry MX switches and per-key RGB.",
            base_price=12999,
            rating=4.9,
            review_count=2103,
            category="Electronics",
            brand="KeyMaster",
            model_url="models/keyboard/CashRegister_01_1k.gltf",
            bundle_eligible=("prod-004",),
            variants=ProductVariants(
                colors=(
                    Variant("color-black", "Stealth Black", 0, 180, hex="#000000"),
                    Variant("color-white", "Ice White", 600, 5, hex="#ffffff"),
                    Variant("color-gray", "Space Gray", 400, 120, hex="#808080"),
                ),
                materials=(
                    Variant("material-plastic", "ABS Keycaps", 0, 250),
                    Variant("material-pbt", "PBT Keycaps", 1500, 150),
                    Variant("material-aluminum", "Aluminum Case", 3500, 40),
                ),
                sizes=(
                    Variant("size-60", "60% Compact", -1000, 100),
                    Variant("size-tkl", "TKL (80%)", 0, 200),
                    Variant("size-full", "Full Size (100%)", 1500, 150),
                ),
            ),
        ),
    ]
