"""Tests for listing filters."""

from datetime import datetime
from decimal import Decimal

import pytest

from realty.models import PropertyKind
from realty.schemas.property import AggregatedProperty
from realty.services.filters import FilterCriteria, filter_properties, parse_price

STAMP = datetime(2026, 1, 10, 9, 0)


def listing(id: int, city: str | None = "Recife", neighborhood: str | None = "Boa Viagem", price: str = "1000", kind: str = "rental") -> AggregatedProperty:
    return AggregatedProperty(
        id=id,
        code=f"IM{id:04d}",
        city=city,
        neighborhood=neighborhood,
        kind=PropertyKind(kind),
        price=Decimal(price),
        status="available",
        created_at=STAMP,
        updated_at=STAMP,
    )


@pytest.fixture
def properties() -> list[AggregatedProperty]:
    return [
        listing(1, city="Recife", neighborhood="Boa Viagem", price="1000", kind="rental"),
        listing(2, city="Recife", neighborhood="Casa Forte", price="5000", kind="sale"),
        listing(3, city="São Paulo", neighborhood="Pinheiros", price="3200", kind="rental"),
        listing(4, city=None, neighborhood=None, price="750", kind="sale"),
    ]


def ids(items) -> list[int]:
    return [item.id for item in items]


class TestParsePrice:
    def test_plain_number(self):
        assert parse_price("1500") == Decimal("1500")

    def test_decimal_comma(self):
        assert parse_price("1500,50") == Decimal("1500.50")

    def test_whitespace_is_stripped(self):
        assert parse_price("  200 ") == Decimal("200")

    @pytest.mark.parametrize("raw", [None, "", "   ", "abc", "12a", "NaN", "Infinity"])
    def test_unparseable_is_none(self, raw):
        assert parse_price(raw) is None


class TestFilterCriteria:
    def test_empty_is_inactive(self):
        assert not FilterCriteria().is_active()

    def test_any_field_makes_it_active(self):
        assert FilterCriteria(max_price="10").is_active()
        assert FilterCriteria(kind="sale").is_active()

    def test_from_query_treats_none_as_blank(self):
        criteria = FilterCriteria.from_query(city="rec", kind=None)
        assert criteria == FilterCriteria(city="rec")

    def test_merge_overrides_only_filled_fields(self):
        merged = FilterCriteria(city="rec", kind="sale").merge(FilterCriteria(kind="rental", min_price="10"))
        assert merged == FilterCriteria(city="rec", kind="rental", min_price="10")

    def test_ignored_fields_reports_unparseable_prices(self):
        criteria = FilterCriteria(min_price="cheap", max_price="2000")
        assert criteria.ignored_fields() == ["min_price"]

    def test_blank_prices_are_not_reported(self):
        assert FilterCriteria(min_price="  ").ignored_fields() == []


class TestFilterProperties:
    def test_empty_criteria_returns_input_unchanged(self, properties):
        result = filter_properties(properties, FilterCriteria())
        assert result == properties

    def test_city_is_case_insensitive_substring(self):
        items = [listing(1, city="São Paulo")]
        assert ids(filter_properties(items, FilterCriteria(city="são"))) == [1]
        assert ids(filter_properties(items, FilterCriteria(city="PAULO"))) == [1]
        assert filter_properties(items, FilterCriteria(city="XYZ")) == []

    def test_neighborhood_substring(self, properties):
        assert ids(filter_properties(properties, FilterCriteria(neighborhood="forte"))) == [2]

    def test_missing_text_value_never_matches(self, properties):
        assert 4 not in ids(filter_properties(properties, FilterCriteria(city="a")))
        assert 4 not in ids(filter_properties(properties, FilterCriteria(neighborhood="a")))

    def test_kind_exact_match(self, properties):
        assert ids(filter_properties(properties, FilterCriteria(kind="sale"))) == [2, 4]
        assert ids(filter_properties(properties, FilterCriteria(kind="rental"))) == [1, 3]

    def test_price_bounds_are_inclusive(self, properties):
        result = filter_properties(properties, FilterCriteria(min_price="1000", max_price="3200"))
        assert ids(result) == [1, 3]

    def test_unparseable_price_is_no_constraint(self, properties):
        result = filter_properties(properties, FilterCriteria(min_price="lots"))
        assert ids(result) == ids(properties)

    def test_recife_rentals(self):
        items = [
            listing(1, city="Recife", price="1000", kind="rental"),
            listing(2, city="Recife", price="5000", kind="sale"),
        ]
        assert ids(filter_properties(items, FilterCriteria(city="rec", kind="rental"))) == [1]

    def test_order_is_preserved(self, properties):
        result = filter_properties(list(reversed(properties)), FilterCriteria(max_price="5000"))
        assert ids(result) == [4, 3, 2, 1]

    @pytest.mark.parametrize(
        "first,second",
        [
            (FilterCriteria(city="rec"), FilterCriteria(kind="sale")),
            (FilterCriteria(min_price="900"), FilterCriteria(neighborhood="a")),
            (FilterCriteria(kind="rental", max_price="3200"), FilterCriteria(city="paulo")),
        ],
    )
    def test_sequential_filters_equal_merged_criteria(self, properties, first, second):
        sequential = filter_properties(filter_properties(properties, first), second)
        merged = filter_properties(properties, first.merge(second))
        assert sequential == merged

    def test_works_with_plain_objects(self):
        class Row:
            city = "Olinda"
            neighborhood = "Carmo"
            kind = "sale"
            price = 250000.0

        assert len(filter_properties([Row()], FilterCriteria(city="olin", kind="sale", max_price="300000"))) == 1
