from bundles import BundleDetector, BundleRule
from catalog import CatalogService, Selection

from helpers import make_line


def _names(offers):
    return [offer.name for offer in offers]


def test_no_offers_for_small_cart(storefront):
    assert storefront.bundle_offers([make_line("prod-004", 1)]) == []


def test_multi_buy_banner(storefront):
    offers = storefront.bundle_offers([make_line("prod-001", 3)])

    assert _names(offers) == ["Buy 3+ Premium Office Chair - Get 15% Off"]
    assert offers[0].product_ids == ("prod-001",)
    assert offers[0].discount_percent == 15


def test_multi_buy_counts_all_configurations_of_a_product(storefront):
    lines = [
        make_line("prod-005", 2),
        make_line("prod-005", 1, selection=Selection("color-gray", "material-pbt", "size-full")),
    ]
    assert _names(storefront.bundle_offers(lines)) == ["Buy 3+ Mechanical Keyboard RGB - Get 15% Off"]


def test_office_setup_bundle(storefront):
    offers = storefront.bundle_offers([make_line("prod-001"), make_line("prod-002")])
    assert _names(offers) == ["Office Setup Bundle - 10% Off"]


def test_complete_workspace_also_matches_smaller_bundle(storefront):
    lines = [make_line("prod-003"), make_line("prod-002"), make_line("prod-001")]
    assert _names(storefront.bundle_offers(lines)) == [
        "Office Setup Bundle - 10% Off",
        "Complete Workspace Bundle - 15% Off",
    ]


def test_offers_do_not_change_totals(storefront):
    lines = [make_line("prod-001"), make_line("prod-002"), make_line("prod-003")]
    summary = storefront.summarize_cart(lines)
    assert summary.total == 15999 + 25999 + 4999
    assert summary.total_savings == 0


def test_custom_rules(products):
    gamer = BundleRule("Gamer Pack - 5% Off", ("prod-004", "prod-005"), 5)
    detector = BundleDetector(CatalogService(products), rules=[gamer])

    offers = detector.detect([make_line("prod-004"), make_line("prod-005"), make_line("prod-001"), make_line("prod-002")])

    assert _names(offers) == ["Gamer Pack - 5% Off"]
