"""Translate a ProductQuery into backend-native, parameterized queries.

Both builders apply the same semantics:
- category: exact match
- min_price / max_price: inclusive bounds, each optional
- search: case-insensitive substring of name or description
- filters are ANDed together
- ordering: relevance (name match 2, description match 1) when searching,
  newest first otherwise

User input only ever travels as a bound parameter.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from catalog.models import ProductQuery

NAME_MATCH_SCORE = 2
DESCRIPTION_MATCH_SCORE = 1


def relevance_score(record: Mapping[str, Any], search: str) -> int:
    """Score a product record against a search term."""
    term = search.casefold()
    score = 0
    if term in (record.get("name") or "").casefold():
        score += NAME_MATCH_SCORE
    if term in (record.get("description") or "").casefold():
        score += DESCRIPTION_MATCH_SCORE
    return score


@dataclass(frozen=True)
class SqlQuery:
    """SELECT/COUNT statements for the SQLite products table."""

    table: str
    where: str
    params: tuple
    order_by: str
    order_params: tuple
    limit: int
    offset: int

    def count_statement(self) -> tuple[str, tuple]:
        return f"SELECT COUNT(*) FROM {self.table}{self.where}", self.params

    def select_statement(self) -> tuple[str, tuple]:
        statement = (
            f"SELECT * FROM {self.table}{self.where}{self.order_by} LIMIT ? OFFSET ?"
        )
        return statement, self.params + self.order_params + (self.limit, self.offset)


def build_sqlite_query(query: ProductQuery, table: str = "products") -> SqlQuery:
    conditions: list[str] = []
    params: list[Any] = []

    if query.category is not None:
        conditions.append("category = ?")
        params.append(query.category)

    if query.min_price is not None:
        conditions.append("price >= ?")
        params.append(query.min_price)

    if query.max_price is not None:
        conditions.append("price <= ?")
        params.append(query.max_price)

    order_params: tuple = ()
    if query.search is not None:
        # casefold() is registered on the connection by SqliteClient; instr() matches literally
        term = query.search.casefold()
        name_match = "instr(casefold(name), ?) > 0"
        description_match = "instr(casefold(description), ?) > 0"
        conditions.append(f"({name_match} OR {description_match})")
        params.extend([term, term])
        order_by = (
            f" ORDER BY (CASE WHEN {name_match} THEN {NAME_MATCH_SCORE} ELSE 0 END"
            f" + CASE WHEN {description_match} THEN {DESCRIPTION_MATCH_SCORE} ELSE 0 END) DESC,"
            " created_at DESC, id DESC"
        )
        order_params = (term, term)
    else:
        order_by = " ORDER BY created_at DESC, id DESC"

    where = f" WHERE {' AND '.join(conditions)}" if conditions else ""

    return SqlQuery(
        table=table,
        where=where,
        params=tuple(params),
        order_by=order_by,
        order_params=order_params,
        limit=query.limit,
        offset=query.offset,
    )


@dataclass(frozen=True)
class CosmosQuery:
    """Cosmos DB NoSQL statements over the product container (alias ``c``)."""

    where: str
    parameters: tuple
    search: Optional[str]
    limit: int
    offset: int

    @property
    def ranks_by_relevance(self) -> bool:
        # ORDER BY only accepts property paths, so relevance is ranked client-side
        return self.search is not None

    def parameter_list(self) -> list[dict[str, Any]]:
        return [dict(parameter) for parameter in self.parameters]

    def count_statement(self) -> str:
        return f"SELECT VALUE COUNT(1) FROM c{self.where}"

    def select_statement(self) -> str:
        statement = f"SELECT * FROM c{self.where} ORDER BY c.created_at DESC"
        if self.ranks_by_relevance:
            return statement
        return f"{statement} OFFSET {int(self.offset)} LIMIT {int(self.limit)}"


def build_cosmos_query(query: ProductQuery) -> CosmosQuery:
    conditions: list[str] = []
    parameters: list[dict[str, Any]] = []

    if query.category is not None:
        conditions.append("c.category = @category")
        parameters.append({"name": "@category", "value": query.category})

    if query.min_price is not None:
        conditions.append("c.price >= @minPrice")
        parameters.append({"name": "@minPrice", "value": query.min_price})

    if query.max_price is not None:
        conditions.append("c.price <= @maxPrice")
        parameters.append({"name": "@maxPrice", "value": query.max_price})

    if query.search is not None:
        conditions.append(
            "(CONTAINS(c.name, @search, true) OR CONTAINS(c.description, @search, true))"
        )
        parameters.append({"name": "@search", "value": query.search})

    where = f" WHERE {' AND '.join(conditions)}" if conditions else ""

    return CosmosQuery(
        where=where,
        parameters=tuple(parameters),
        search=query.search,
        limit=query.limit,
        offset=query.offset,
    )
