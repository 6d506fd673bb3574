"""Unit tests for query option types."""

import pytest

from crudkit.domain.exceptions import MalformedFilterException
from crudkit.domain.query import (
    MAX_OFFSET,
    MAX_PAGE_SIZE,
    FieldOperators,
    FilterOptions,
    FindOptions,
    OrderBy,
    PagingOptions,
    SortDirection,
    normalize_where,
)

pytestmark = pytest.mark.unit


class TestFieldOperators:
    """Test cases for per-field operator sets."""

    def test_from_mapping_maps_in_keyword(self):
        """Test the wire name 'in' maps onto in_."""
        operators = FieldOperators.from_mapping({"in": ["A1", "A2"], "nin": ["B2"]})

        assert operators.in_ == ["A1", "A2"]
        assert operators.get("in") == ["A1", "A2"]
        assert dict(operators.items()) == {"in": ["A1", "A2"], "nin": ["B2"]}
        assert not operators.has_range

    def test_range_operators(self):
        """Test range operators are reported."""
        operators = FieldOperators(gte=18, lt=65)

        assert operators.has_range
        assert dict(operators.items()) == {"gte": 18, "lt": 65}

    def test_unknown_operator_rejected(self):
        """Test an unknown operator is never dropped silently."""
        with pytest.raises(MalformedFilterException) as exc_info:
            FieldOperators.from_mapping({"like": "Al%"})

        assert "like" in str(exc_info.value)
        assert exc_info.value.error_code == "MALFORMED_FILTER"

    def test_in_requires_list(self):
        """Test set operators only accept lists."""
        with pytest.raises(MalformedFilterException):
            FieldOperators(in_="A1")

    def test_empty_operator_set_rejected(self):
        """Test an operator set needs at least one operator."""
        with pytest.raises(MalformedFilterException):
            FieldOperators()


class TestOrdering:
    """Test cases for order entries."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("asc", SortDirection.ASC),
            ("DESC", SortDirection.DESC),
            ("descending", SortDirection.DESC),
            (SortDirection.ASC, SortDirection.ASC),
        ],
    )
    def test_parse_direction(self, raw, expected):
        """Test accepted direction spellings."""
        assert SortDirection.parse(raw) == expected

    def test_invalid_direction(self):
        """Test an unknown direction is rejected."""
        with pytest.raises(MalformedFilterException):
            SortDirection.parse("sideways")

    def test_coerce_forms(self):
        """Test the accepted shapes of an order entry."""
        assert OrderBy.coerce("name") == OrderBy("name")
        assert OrderBy.coerce(("age", "desc")) == OrderBy("age", SortDirection.DESC)
        assert OrderBy.coerce({"field": "age", "dir": "desc"}) == OrderBy("age", SortDirection.DESC)

    def test_coerce_mapping_without_field(self):
        """Test a mapping entry must name its field."""
        with pytest.raises(MalformedFilterException):
            OrderBy.coerce({"dir": "asc"})


class TestFilterOptions:
    """Test cases for filter, paging and find options."""

    def test_normalizes_where_and_order(self):
        """Test plain dicts become FieldOperators and OrderBy entries."""
        options = FilterOptions(
            where={"age": {"gte": 18}, "room": "A1"},
            order=[("age", "desc")],
        )

        assert options.where["age"] == FieldOperators(gte=18)
        assert options.where["room"] == "A1"
        assert options.order == [OrderBy("age", SortDirection.DESC)]

    def test_referenced_fields(self):
        """Test every mentioned field is reported."""
        options = FilterOptions(select=["name"], where={"age": 3}, order=["room"])

        assert options.referenced_fields() == {"name", "age", "room"}

    def test_select_must_not_be_empty(self):
        """Test an empty projection is rejected, not read as 'every field'."""
        with pytest.raises(MalformedFilterException):
            FilterOptions(select=[])

    def test_largest_offset_is_accepted(self):
        """Test the bound is inclusive."""
        options = PagingOptions(page=MAX_OFFSET // 10, page_size=10)

        assert options.page * options.page_size <= MAX_OFFSET

    def test_select_must_be_list(self):
        """Test a bare string is not a projection."""
        with pytest.raises(MalformedFilterException):
            FilterOptions(select="name")

    def test_where_must_be_mapping(self):
        """Test a non-mapping predicate is rejected."""
        with pytest.raises(MalformedFilterException):
            normalize_where(["room", "A1"])

    def test_paging_defaults(self):
        """Test page defaults to 0 and page size to the component default."""
        options = PagingOptions()

        assert options.page == 0
        assert options.page_size is None

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"page": -1},
            {"page_size": 0},
            {"page": True},
            {"page_size": MAX_PAGE_SIZE + 1},
            {"page": 10**19},
            {"page": MAX_OFFSET // 10 + 1, "page_size": 10},
        ],
    )
    def test_paging_rejects_invalid_bounds(self, kwargs):
        """Test negative pages and non-positive page sizes are rejected."""
        with pytest.raises(MalformedFilterException):
            PagingOptions(**kwargs)

    def test_find_options_from_filter(self):
        """Test storage options keep the filter and add bounds."""
        options = FilterOptions(where={"room": "A1"}, order=["name"])

        find = FindOptions.from_filter(options, skip=10, take=5)

        assert find.where == {"room": "A1"}
        assert find.order == [OrderBy("name")]
        assert (find.skip, find.take) == (10, 5)
        assert FindOptions.from_filter(None) == FindOptions()
