from business_finder.etl.categories import map_category


def test_map_category_known_values_case_insensitive():
    assert map_category("hotel") == "lodging"
    assert map_category(" Shopping ") == "shopping_mall"
    assert map_category("COFFEE") == "cafe"


def test_map_category_passes_unknown_through():
    assert map_category("restaurant") == "restaurant"
    assert map_category(" car_wash ") == "car_wash"
