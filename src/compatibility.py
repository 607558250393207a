"""Variant compatibility rules.

A variant may declare ids (from any axis) it cannot be combined with. The
check only consults the candidate's own list, so an exclusion declared on
one side only is honoured from that side only.
"""
from __future__ import annotations

import logging
from typing import List, Mapping, Optional, Sequence, Tuple, Union

from catalog import AXES, Product, Selection, Variant

logger = logging.getLogger(__name__)

PartialSelection = Union[Selection, Mapping[str, Optional[str]]]


def selected_ids(selection: PartialSelection) -> List[str]:
    values = selection.as_dict().values() if isinstance(selection, Selection) else selection.values()
    return [value for value in values if value]


def is_compatible(candidate: Variant, selection: PartialSelection) -> bool:
    if not candidate.incompatible_with:
        return True
    chosen = set(selected_ids(selection))
    return not any(variant_id in chosen for variant_id in candidate.incompatible_with)


def compatible_options(variants: Sequence[Variant], selection: PartialSelection) -> List[Variant]:
    """Variants from ``variants`` that can be picked next to ``selection``."""
    return [variant for variant in variants if is_compatible(variant, selection)]


def asymmetric_exclusions(product: Product) -> List[Tuple[str, str]]:
    """Return ``(declaring_id, excluded_id)`` pairs not mirrored on the other side.

    Each hit is logged as a catalog data-quality warning. Results are not
    corrected; compatibility answers keep following each variant's own list.
    """
    by_id = {}
    for axis in AXES:
        for variant in product.variants.for_axis(axis):
            by_id.setdefault(variant.id, variant)

    findings: List[Tuple[str, str]] = []
    for variant in by_id.values():
        for excluded_id in variant.incompatible_with or ():
            other = by_id.get(excluded_id)
            if other is None or variant.id not in (other.incompatible_with or ()):
                findings.append((variant.id, excluded_id))
                logger.warning(
                    "Product %s: %s excludes %s but the exclusion is not declared in reverse",
                    product.id,
                    variant.id,
                    excluded_id,
                )
    return findings
