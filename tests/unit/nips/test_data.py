"""
Unit tests for nips.nip99.data module.

Tests:
- ProductInput required fields, price validation, aliases, normalization
- SearchFilters validation, relay filter construction, client-side matching
"""

import pytest
from pydantic import ValidationError

from nostrmarket.models import Currency, PaymentMethod, Product
from nostrmarket.nips.nip99 import ProductInput, SearchFilters
from tests.conftest import OTHER_PUBKEY, PUBKEY


BASE = {
    "title": "Bicicleta",
    "description": "Poco uso",
    "price": "100",
    "currency": "SATS",
    "contactInfo": "alice@example.com",
}


def _input(**overrides) -> ProductInput:
    return ProductInput.model_validate({**BASE, **overrides})


# =============================================================================
# ProductInput
# =============================================================================


class TestProductInputRequired:
    @pytest.mark.parametrize("field", ["title", "description", "price", "currency", "contactInfo"])
    def test_missing(self, field: str) -> None:
        data = dict(BASE)
        del data[field]
        with pytest.raises(ValidationError):
            ProductInput.model_validate(data)

    @pytest.mark.parametrize("field", ["title", "description", "price", "contactInfo"])
    def test_blank(self, field: str) -> None:
        with pytest.raises(ValidationError):
            _input(**{field: "   "})


class TestProductInputPrice:
    @pytest.mark.parametrize("price", ["0", "0.0001", "250000", 42, 1.5])
    def test_valid(self, price) -> None:
        assert _input(price=price).price == str(price)

    @pytest.mark.parametrize("price", ["abc", "-1", "NaN", "Infinity", True])
    def test_invalid(self, price) -> None:
        with pytest.raises(ValidationError):
            _input(price=price)


class TestProductInputNormalization:
    def test_snake_case_names_accepted(self) -> None:
        product = ProductInput.model_validate({**{k: v for k, v in BASE.items() if k != "contactInfo"}, "contact_info": "x"})
        assert product.contact_info == "x"

    def test_provincia_alias(self) -> None:
        assert _input(provincia="Mendoza").location == "Mendoza"

    def test_currency_case_insensitive(self) -> None:
        assert _input(currency="btc").currency is Currency.BTC

    def test_unknown_currency(self) -> None:
        with pytest.raises(ValidationError):
            _input(currency="EUR")

    def test_whitespace_stripped(self) -> None:
        assert _input(title="  Bicicleta  ").title == "Bicicleta"

    def test_contact_single_line(self) -> None:
        assert _input(contactInfo="tel 123\r\n  mail a@b.c").contact_info == "tel 123 mail a@b.c"

    def test_title_single_line(self) -> None:
        assert _input(title="Bici\nroja").title == "Bici roja"

    @pytest.mark.parametrize("field", ["description", "notes"])
    def test_notes_heading_line_rejected(self, field: str) -> None:
        with pytest.raises(ValidationError, match="Notas adicionales"):
            _input(**{field: "Texto\n## Notas adicionales\nmás"})

    def test_notes_heading_inline_allowed(self) -> None:
        assert _input(description="ver ## Notas adicionales abajo").description.startswith("ver")

    def test_payment_methods_deduplicated(self) -> None:
        product = _input(paymentMethods=["Lightning", "Lightning", "On-chain Bitcoin"])
        assert product.payment_methods == (PaymentMethod.LIGHTNING, PaymentMethod.ONCHAIN)

    def test_unknown_payment_method(self) -> None:
        with pytest.raises(ValidationError):
            _input(paymentMethods=["PayPal"])

    def test_too_many_images(self) -> None:
        with pytest.raises(ValidationError):
            _input(images=[f"https://x.com/{i}.png" for i in range(4)])

    def test_duplicate_images_count_once(self) -> None:
        assert _input(images=["https://x.com/a.png"] * 4).images == ("https://x.com/a.png",)

    def test_categories_drop_topic_and_blanks(self) -> None:
        product = _input(categories=["hogar", " ", "nostrmarketplace", "hogar", "jardín"])
        assert product.categories == ("hogar", "jardín")

    def test_single_category_string(self) -> None:
        assert _input(categories="hogar").categories == ("hogar",)

    @pytest.mark.parametrize(
        "website,expected",
        [
            ("tienda.example.com", "https://tienda.example.com"),
            ("http://tienda.example.com", "http://tienda.example.com"),
            ("  ", None),
            (None, None),
        ],
    )
    def test_website(self, website, expected) -> None:
        assert _input(website=website).website == expected

    def test_frozen(self) -> None:
        with pytest.raises(ValidationError):
            _input().title = "x"  # type: ignore[misc]


# =============================================================================
# SearchFilters
# =============================================================================


def _product(**overrides) -> Product:
    fields = {
        "id": "1" * 64,
        "author_key": PUBKEY,
        "identifier": "bici",
        "title": "Bicicleta roja",
        "price": "1",
        "currency": Currency.SATS,
        "created_at": 1,
        "summary": "Rodado 26",
        "description": "Con canasto",
        "categories": ("Deportes",),
    }
    fields.update(overrides)
    return Product(**fields)


class TestSearchFiltersValidation:
    def test_defaults(self) -> None:
        filters = SearchFilters()
        assert filters.limit is None
        assert filters.search is None
        assert filters.authors == ()

    def test_bad_author(self) -> None:
        with pytest.raises(ValidationError):
            SearchFilters(authors=["npub1xyz"])

    def test_unknown_key_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SearchFilters.model_validate({"kinds": [1]})

    def test_blank_search_is_none(self) -> None:
        assert SearchFilters(search="  ").search is None

    @pytest.mark.parametrize("limit", [0, 5001])
    def test_limit_bounds(self, limit: int) -> None:
        with pytest.raises(ValidationError):
            SearchFilters(limit=limit)


class TestToRelayFilter:
    def test_mandatory_constraints(self) -> None:
        assert SearchFilters().to_relay_filter(100) == {
            "kinds": [30402],
            "#t": ["nostrmarketplace"],
            "limit": 100,
        }

    def test_caller_constraints_merged(self) -> None:
        filters = SearchFilters(since=10, until=20, authors=[PUBKEY, PUBKEY], limit=5, search="bici")
        assert filters.to_relay_filter(100) == {
            "kinds": [30402],
            "#t": ["nostrmarketplace"],
            "limit": 5,
            "since": 10,
            "until": 20,
            "authors": [PUBKEY],
            "search": "bici",
        }

    def test_categories_stay_client_side(self) -> None:
        relay_filter = SearchFilters(categories=["hogar"]).to_relay_filter(100)
        assert relay_filter["#t"] == ["nostrmarketplace"]


class TestMatches:
    def test_no_constraints(self) -> None:
        assert SearchFilters().matches(_product())

    def test_category_case_insensitive(self) -> None:
        assert SearchFilters(categories=["deportes"]).matches(_product())
        assert not SearchFilters(categories=["hogar"]).matches(_product())

    @pytest.mark.parametrize("term", ["ROJA", "rodado", "canasto", "deport"])
    def test_text_matches_any_field(self, term: str) -> None:
        assert SearchFilters(search=term).matches(_product())

    def test_text_no_match(self) -> None:
        assert not SearchFilters(search="mesa").matches(_product())

    def test_author_not_checked_client_side(self) -> None:
        assert SearchFilters(authors=[OTHER_PUBKEY]).matches(_product())
