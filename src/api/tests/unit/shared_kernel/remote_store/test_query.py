"""Unit tests for the remote store query builder."""

import pytest

from shared_kernel.remote_store import FilterOperator, Ordering, Query


class TestQueryBuilder:
    """Tests for chained Query construction."""

    def test_builder_methods_return_new_queries(self):
        """Builder calls should never mutate the query they are called on."""
        base = Query("people")
        filtered = base.eq("client_id", "c1")

        assert base.filters == ()
        assert len(filtered.filters) == 1
        assert filtered.table == "people"

    def test_filters_accumulate_in_call_order(self):
        query = (
            Query("people")
            .eq("client_id", "c1")
            .neq("status", "offboarded")
            .is_not_null("associate_status")
        )

        assert [f.operator for f in query.filters] == [
            FilterOperator.EQ,
            FilterOperator.NEQ,
            FilterOperator.IS_NOT_NULL,
        ]

    def test_in_materializes_values_as_tuple(self):
        """A generator of keys should be captured, not consumed lazily."""
        query = Query("tasks").in_("person_id", (f"p{i}" for i in range(3)))

        assert query.filters[0].value == ("p0", "p1", "p2")

    def test_range_is_inclusive(self):
        query = Query("people").range(25, 49)

        assert query.offset == 25
        assert query.max_rows == 25

    @pytest.mark.parametrize("start,end", [(-1, 5), (10, 9)])
    def test_invalid_range_raises(self, start, end):
        with pytest.raises(ValueError):
            Query("people").range(start, end)

    def test_negative_limit_raises(self):
        with pytest.raises(ValueError):
            Query("people").limit(-1)

    def test_order_keeps_every_sort_key(self):
        query = Query("people").order("last_name").order("created_at", ascending=False)

        assert query.ordering == (
            Ordering("last_name", True),
            Ordering("created_at", False),
        )


class TestQuerySearch:
    """Tests for substring search clauses."""

    @pytest.mark.parametrize("term", [None, "", "   "])
    def test_blank_search_leaves_query_unchanged(self, term):
        """An empty search must be the same query as no search at all."""
        base = Query("people").eq("client_id", "c1")

        assert base.search(("first_name",), term) == base

    def test_search_term_is_stripped(self):
        query = Query("people").search(("first_name", "last_name"), "  ann ")

        assert query.searches[0].term == "ann"
        assert query.searches[0].columns == ("first_name", "last_name")


class TestQueryForCount:
    """Tests for deriving the count query from a page query."""

    def test_for_count_drops_paging_and_ordering(self):
        page = (
            Query("people")
            .eq("client_id", "c1")
            .search(("first_name",), "ann")
            .order("created_at", ascending=False)
            .range(50, 74)
        )

        count = page.for_count()

        assert count.filters == page.filters
        assert count.searches == page.searches
        assert count.ordering == ()
        assert count.offset is None
        assert count.max_rows is None


class TestQueryDescribe:
    """Tests for the log summary of a query."""

    def test_describe_reports_in_list_size_not_contents(self):
        query = Query("documents").in_("person_id", ["secret-1", "secret-2"])

        summary = query.describe()

        assert summary == {"table": "documents", "filters": ["person_id.in[2]"]}
        assert "secret-1" not in str(summary)

    def test_describe_includes_paging(self):
        summary = Query("people").search(("first_name",), "x").range(0, 24).describe()

        assert summary["search"] is True
        assert summary["offset"] == 0
        assert summary["max_rows"] == 25
