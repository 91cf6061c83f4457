from shoplocal.etl import mapping
from shoplocal.models import NormalizedProduct


def test_normalize_product_defaults_for_empty_record():
    product = mapping.normalize_product({})

    assert product.id == "0"
    assert product.name == "Unnamed Product"
    assert product.slug == ""
    assert product.price == 0
    assert product.original_price == 0
    assert product.image == ""
    assert product.vendor == "Default Vendor"
    assert product.vendor_slug == "default-vendor"
    assert product.category == "Uncategorized"
    assert product.brand == "Unknown Brand"
    assert product.upc == ""
    assert product.description == ""
    assert product.tags == []
    assert product.accepts_offers is True
    assert product.is_new is True
    assert product.is_trending is True
    assert product.rating == 0
    assert product.review_count == 0
    assert product.stock == 0
    assert product.colors == ["#000000"]
    assert product == NormalizedProduct()


def test_normalize_product_tolerates_non_dict_input():
    assert mapping.normalize_product(None) == NormalizedProduct()
    assert mapping.normalize_product(["not", "a", "record"]) == NormalizedProduct()


def test_explicit_vendor_slug_wins():
    raw = {
        "vendor_slug": "Acme_Goods",
        "vendor": {"username": "someone-else"},
        "username": "flat-user",
        "author": "author-name",
    }
    assert mapping.normalize_product(raw).vendor_slug == "Acme_Goods"
    assert mapping.normalize_product({"vendorSlug": "camel", "vendor_slug": "snake"}).vendor_slug == "camel"


def test_vendor_object_slug_order():
    vendor = {"user_nicename": "nice", "slug": "store-slug", "user_login": "login"}
    assert mapping.resolve_vendor_slug({"vendor": vendor}) == "login"
    assert mapping.resolve_vendor_slug({"vendor": {"user_nicename": "nice"}}) == "nice"
    assert mapping.resolve_vendor_slug({"vendor": {"username": "", "slug": "store-slug"}}) == "store-slug"


def test_flat_vendor_keys_order():
    raw = {"author_name": "Jane", "author": 42, "store_username": "janes-store"}
    assert mapping.resolve_vendor_slug(raw) == "janes-store"
    assert mapping.resolve_vendor_slug({"author": 42, "vendor": "Jane Store"}) == "42"


def test_vendor_slug_derived_from_display_name():
    assert mapping.normalize_product({"vendor": "Jhimson Clothing Store"}).vendor_slug == "jhimsonclothing"
    assert mapping.derive_slug_from_name("Mery-Joy's Market") == "meryjoys"
    assert mapping.derive_slug_from_name("Corner Shop Store") == "corner"
    assert mapping.derive_slug_from_name('The "Best" SHOP') == "thebest"


def test_vendor_slug_falls_back_when_derivation_is_empty():
    assert mapping.normalize_product({"vendor": "!!!"}).vendor_slug == "default-vendor"
    assert mapping.normalize_product({"vendor": ""}).vendor_slug == "default-vendor"


def test_vendor_display_name():
    assert mapping.normalize_product({"vendor": "Jhimson Clothing Store"}).vendor == "Jhimson Clothing Store"
    assert mapping.normalize_product({"vendor": {"store_name": "Acme", "username": "acme"}}).vendor == "Acme"
    assert mapping.normalize_product({"vendor": {"username": "acme"}}).vendor == "Default Vendor"


def test_resolve_image_url_order():
    gallery = {"images": [{"src": "https://cdn/a.jpg"}, {"src": "https://cdn/b.jpg"}]}
    assert mapping.resolve_image_url(gallery) == "https://cdn/a.jpg"
    assert mapping.resolve_image_url({"image": "https://cdn/direct.jpg", **gallery}) == "https://cdn/direct.jpg"
    assert mapping.resolve_image_url({"image": {"src": "https://cdn/obj.jpg"}}) == "https://cdn/obj.jpg"
    assert mapping.resolve_image_url({"images": [], "thumbnail": "t.jpg", "image_url": "u.jpg"}) == "t.jpg"
    assert mapping.resolve_image_url({"featured_image": "f.jpg", "thumbnail": "t.jpg"}) == "f.jpg"
    assert mapping.resolve_image_url({"images": [{"alt": "no src"}]}) == ""


def test_numeric_fields_are_coerced():
    product = mapping.normalize_product(
        {"id": 101, "price": "19.99", "rating": "4.5", "reviewCount": "12", "stock": 3.0}
    )
    assert product.id == "101"
    assert product.price == 19.99
    assert product.original_price == 19.99
    assert product.rating == 4.5
    assert product.review_count == 12
    assert product.stock == 3

    bad = mapping.normalize_product({"price": "call us", "stock": "lots"})
    assert bad.price == 0
    assert bad.stock == 0


def test_original_price_prefers_explicit_value():
    product = mapping.normalize_product({"price": 10, "originalPrice": 15})
    assert product.original_price == 15
    assert mapping.normalize_product({"price": 10, "regular_price": "12"}).original_price == 12


def test_null_coalescing_keeps_falsy_values():
    product = mapping.normalize_product(
        {"name": "", "acceptsOffers": False, "is_new": "false", "isTrending": 0, "colors": []}
    )
    assert product.name == ""
    assert product.accepts_offers is False
    assert product.is_new is False
    assert product.is_trending is False
    assert product.colors == []


def test_tags_from_term_objects():
    product = mapping.normalize_product({"tags": [{"id": 1, "name": "Vintage"}, "handmade", None]})
    assert product.tags == ["Vintage", "handmade"]


def test_normalize_product_is_deterministic():
    raw = {
        "id": "7",
        "name": "Linen Shirt",
        "vendor": "Jhimson Clothing Store",
        "images": [{"src": "https://cdn/shirt.jpg"}],
        "tags": ["summer"],
    }
    first = mapping.normalize_product(raw)
    second = mapping.normalize_product(raw)
    assert first == second
    assert first.tags is not second.tags
    assert raw["tags"] == ["summer"]


def test_to_dict_uses_storefront_keys():
    data = mapping.normalize_product({"vendor_slug": "acme", "reviewCount": 3}).to_dict()
    assert data["vendorSlug"] == "acme"
    assert data["reviewCount"] == 3
    assert data["originalPrice"] == 0
    assert data["acceptsOffers"] is True
    assert data["colors"] == ["#000000"]


def test_normalize_vendor_defaults():
    vendor = mapping.normalize_vendor({})
    assert vendor.id == ""
    assert vendor.logo == mapping.DEFAULT_VENDOR_LOGO
    assert vendor.bio == "No description available"
    assert vendor.location == "Location not specified"
    assert vendor.specialty == "General"
    assert vendor.rating == 4.5
    assert vendor.latitude is None
    assert vendor.coordinate is None
    assert vendor.policies["returns"] == mapping.DEFAULT_RETURN_POLICY


def test_normalize_vendor_alternate_keys():
    vendor = mapping.normalize_vendor(
        {
            "vendor_id": 12,
            "store_name": "Jhimson Clothing",
            "store_slug": "jhimson",
            "average_rating": "4.8",
            "address": {"city": "Austin", "latitude": "30.2672", "longitude": "-97.7431"},
            "categories": [{"name": "Apparel"}],
            "social": {"fb": "https://facebook.com/jhimson"},
        }
    )
    assert vendor.id == "12"
    assert vendor.name == "Jhimson Clothing"
    assert vendor.slug == "jhimson"
    assert vendor.rating == 4.8
    assert vendor.location == "Austin"
    assert vendor.specialty == "Apparel"
    assert vendor.latitude == 30.2672
    assert vendor.longitude == -97.7431
    assert vendor.social_links["facebook"] == "https://facebook.com/jhimson"


def test_normalize_vendor_ignores_blank_coordinates():
    vendor = mapping.normalize_vendor({"lat": "", "lng": "not-a-number"})
    assert vendor.latitude is None
    assert vendor.longitude is None


def test_normalize_vendor_keeps_zero_id():
    assert mapping.normalize_vendor({"id": 0}).id == "0"
    assert mapping.normalize_vendor({"id": "", "vendor_id": 7}).id == "7"
    assert mapping.normalize_vendor({"id": None, "vendor_id": 0}).id == "0"


def test_non_finite_numbers_fall_back_to_defaults():
    product = mapping.normalize_product({"price": "nan", "originalPrice": "inf", "rating": "-inf", "stock": "inf"})
    assert product.price == 0
    assert product.original_price == 0
    assert product.rating == 0
    assert product.stock == 0

    vendor = mapping.normalize_vendor({"rating": "nan", "lat": "inf", "lng": "nan"})
    assert vendor.rating == 4.5
    assert vendor.latitude is None
    assert vendor.longitude is None
