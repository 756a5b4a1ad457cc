"""Tests for the backend query builders.

These tests verify:
- Filter translation for SQLite and Cosmos DB (category, price range, search)
- AND composition of filters
- Ordering (newest first vs. relevance)
- Pagination offsets
- User input only travels as bound parameters
"""

from catalog.models import ProductQuery
from catalog.repositories.query_builder import (
    build_cosmos_query,
    build_sqlite_query,
    relevance_score,
)


class TestSqliteQueryBuilder:
    """Test build_sqlite_query output."""

    def test_default_query_has_no_filters(self):
        """Test that an empty query selects everything newest first."""
        sql_query = build_sqlite_query(ProductQuery())

        statement, params = sql_query.select_statement()

        assert sql_query.where == ""
        assert "ORDER BY created_at DESC, id DESC" in statement
        assert statement.endswith("LIMIT ? OFFSET ?")
        assert params == (10, 0)

    def test_category_and_price_range_are_anded(self):
        """Test that category and both price bounds combine with AND."""
        sql_query = build_sqlite_query(
            ProductQuery(category="fruit", min_price=10, max_price=20)
        )

        assert sql_query.where == " WHERE category = ? AND price >= ? AND price <= ?"
        assert sql_query.params == ("fruit", 10, 20)

    def test_single_price_bound(self):
        """Test that either price bound can be used on its own."""
        only_min = build_sqlite_query(ProductQuery(min_price=5))
        only_max = build_sqlite_query(ProductQuery(max_price=7.5))

        assert only_min.where == " WHERE price >= ?"
        assert only_min.params == (5,)
        assert only_max.where == " WHERE price <= ?"
        assert only_max.params == (7.5,)

    def test_search_matches_casefolded_substrings(self):
        """Test that search filters name/description and ranks by relevance."""
        sql_query = build_sqlite_query(ProductQuery(search="Tom"))

        statement, params = sql_query.select_statement()

        assert "instr(casefold(name), ?) > 0" in sql_query.where
        assert "instr(casefold(description), ?) > 0" in sql_query.where
        assert "LIKE" not in statement
        assert "CASE WHEN instr(casefold(name), ?) > 0" in statement
        assert params == ("tom", "tom", "tom", "tom", 10, 0)

    def test_search_text_never_reaches_statement(self):
        """Test that hostile search text is only a parameter."""
        hostile = "'; DROP TABLE products; --"
        sql_query = build_sqlite_query(ProductQuery(search=hostile))

        statement, params = sql_query.select_statement()

        assert "DROP TABLE" not in statement
        assert hostile.casefold() in params

    def test_pagination_offset(self):
        """Test that offset is (page - 1) * limit."""
        sql_query = build_sqlite_query(ProductQuery(page=3, limit=25))

        count_statement, count_params = sql_query.count_statement()
        _, params = sql_query.select_statement()

        assert count_statement == "SELECT COUNT(*) FROM products"
        assert count_params == ()
        assert params[-2:] == (25, 50)


class TestCosmosQueryBuilder:
    """Test build_cosmos_query output."""

    def test_default_query(self):
        """Test that an empty query pages newest first on the server."""
        cosmos_query = build_cosmos_query(ProductQuery())

        assert cosmos_query.where == ""
        assert cosmos_query.count_statement() == "SELECT VALUE COUNT(1) FROM c"
        assert cosmos_query.select_statement() == (
            "SELECT * FROM c ORDER BY c.created_at DESC OFFSET 0 LIMIT 10"
        )
        assert cosmos_query.parameter_list() == []

    def test_filters_are_parameterized(self):
        """Test that every filter value is bound as a named parameter."""
        cosmos_query = build_cosmos_query(
            ProductQuery(page=2, limit=5, category="fruit", min_price=10, max_price=20)
        )

        assert cosmos_query.where == (
            " WHERE c.category = @category AND c.price >= @minPrice AND c.price <= @maxPrice"
        )
        assert cosmos_query.parameter_list() == [
            {"name": "@category", "value": "fruit"},
            {"name": "@minPrice", "value": 10},
            {"name": "@maxPrice", "value": 20},
        ]
        assert cosmos_query.select_statement().endswith("OFFSET 5 LIMIT 5")

    def test_search_is_case_insensitive_and_ranked_client_side(self):
        """Test that search uses CONTAINS(..., true) and skips server paging."""
        cosmos_query = build_cosmos_query(ProductQuery(search="Tom"))

        assert "CONTAINS(c.name, @search, true)" in cosmos_query.where
        assert "CONTAINS(c.description, @search, true)" in cosmos_query.where
        assert cosmos_query.ranks_by_relevance
        assert "OFFSET" not in cosmos_query.select_statement()


class TestRelevanceScore:
    """Test the shared relevance ranking."""

    def test_name_match_outranks_description_match(self):
        """Test scores for name, description and combined matches."""
        assert relevance_score({"name": "Tomato", "description": None}, "tom") == 2
        assert relevance_score({"name": "Sauce", "description": "ripe tomatoes"}, "TOM") == 1
        assert relevance_score({"name": "Tomato", "description": "Fresh tomato"}, "tom") == 3
        assert relevance_score({"name": "Onion"}, "tom") == 0
        assert relevance_score({"name": "Éclair", "description": "PÂTE À CHOUX"}, "ÉCLAIR") == 2
        assert relevance_score({"name": "Éclair", "description": "PÂTE À CHOUX"}, "pâte") == 1
