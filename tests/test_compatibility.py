import logging

from catalog import Product, ProductVariants, Selection, Variant
from compatibility import asymmetric_exclusions, compatible_options, is_compatible


def _variant(chair, axis, variant_id):
    return chair.variant(axis, variant_id)


def test_variant_without_exclusions_is_always_compatible(chair):
    black = _variant(chair, "color", "color-black")
    assert is_compatible(black, {"material": "material-wood", "size": "size-m"}) is True


def test_excluded_selection_is_incompatible(chair):
    blue = _variant(chair, "color", "color-blue")
    assert is_compatible(blue, {"material": "material-wood", "size": "size-m"}) is False


def test_other_materials_are_fine(chair):
    blue = _variant(chair, "color", "color-blue")
    for material in ("material-mesh", "material-leather", "material-fabric"):
        assert is_compatible(blue, {"material": material}) is True


def test_axis_of_the_selected_id_does_not_matter(chair):
    wood = _variant(chair, "material", "material-wood")
    # The excluded id is matched even when it sits under an unexpected key.
    assert is_compatible(wood, {"size": "color-blue"}) is False


def test_missing_axes_are_ignored(chair):
    fabric = _variant(chair, "material", "material-fabric")
    assert is_compatible(fabric, {}) is True
    assert is_compatible(fabric, {"color": None, "size": "size-m"}) is True
    assert is_compatible(fabric, {"color": "color-red"}) is False


def test_full_selection_objects_are_accepted(chair):
    fabric = _variant(chair, "material", "material-fabric")
    assert is_compatible(fabric, Selection("color-red", "material-mesh", "size-m")) is False
    assert is_compatible(fabric, Selection("color-gray", "material-mesh", "size-m")) is True


def _one_sided_product():
    return Product(
        id="lamp",
        name="Lamp",
        base_price=1000,
        variants=ProductVariants(
            colors=(Variant("color-gold", "Gold", 0, 5, incompatible_with=("material-glass",)),),
            materials=(Variant("material-glass", "Glass", 0, 5), Variant("material-brass", "Brass", 0, 5)),
            sizes=(Variant("size-one", "One", 0, 5),),
        ),
    )


def test_exclusions_are_not_mirrored():
    lamp = _one_sided_product()
    gold = lamp.variant("color", "color-gold")
    glass = lamp.variant("material", "material-glass")

    assert is_compatible(gold, {"material": "material-glass"}) is False
    assert is_compatible(glass, {"color": "color-gold"}) is True


def test_compatible_options_filters_choices(chair):
    choices = compatible_options(chair.variants.colors, {"material": "material-wood"})
    assert [variant.id for variant in choices] == ["color-black", "color-gray", "color-red"]


def test_asymmetric_exclusions_are_reported(caplog):
    with caplog.at_level(logging.WARNING, logger="compatibility"):
        findings = asymmetric_exclusions(_one_sided_product())

    assert findings == [("color-gold", "material-glass")]
    assert "not declared in reverse" in caplog.text


def test_demo_chair_reports_one_sided_fabric_exclusion(chair):
    assert asymmetric_exclusions(chair) == [("material-fabric", "color-red")]
