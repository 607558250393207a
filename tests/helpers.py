from datetime import date

from cart import CartLine
from catalog import Selection

TODAY = date(2026, 1, 15)

# Zero-modifier configurations of the demo catalog.
BASE_SELECTIONS = {
    "prod-001": Selection("color-black", "material-mesh", "size-m"),
    "prod-002": Selection("color-white", "material-laminate", "size-120"),
    "prod-003": Selection("color-silver", "material-aluminum", "size-single"),
    "prod-004": Selection("color-black", "material-plastic", "size-standard"),
    "prod-005": Selection("color-black", "material-plastic", "size-tkl"),
}


def make_line(product_id, quantity=1, selection=None, **kwargs):
    return CartLine(
        product_id=product_id,
        selection=selection or BASE_SELECTIONS[product_id],
        quantity=quantity,
        **kwargs,
    )
