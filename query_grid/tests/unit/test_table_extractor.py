"""Unit tests for query_grid.parser.table_extractor."""

from __future__ import annotations

import pytest

from query_grid.parser.table_extractor import (
    extract_primary_table_name,
    extract_tables,
    parse_table_reference,
)

# ---------------------------------------------------------------------------
# FROM clause
# ---------------------------------------------------------------------------


class TestFromClause:
    def test_bare_table(self):
        tables = extract_tables("SELECT * FROM users")
        assert len(tables) == 1
        assert tables[0].name == "users"
        assert tables[0].alias is None

    def test_table_and_alias_lowercased(self):
        tables = extract_tables("SELECT * FROM Users U")
        assert tables[0].name == "users"
        assert tables[0].alias == "u"

    def test_as_alias(self):
        tables = extract_tables("select * from users as u")
        assert tables[0].alias == "u"

    def test_quoted_alias(self):
        tables = extract_tables('SELECT * FROM users AS "Usr"')
        assert tables[0].alias == "usr"

    def test_defaults_before_key_resolution(self):
        table = extract_tables("SELECT * FROM users")[0]
        assert table.primary_key_column is None
        assert table.primary_key_field == "id"

    def test_whitespace_is_collapsed(self):
        tables = extract_tables("SELECT *\n  FROM\n\tusers\n  u\n")
        assert tables[0].name == "users"
        assert tables[0].alias == "u"

    def test_first_from_wins(self):
        sql = "SELECT * FROM users WHERE id IN (SELECT user_id FROM orders)"
        assert [t.name for t in extract_tables(sql)] == ["users"]

    @pytest.mark.parametrize(
        "sql",
        [
            "SELECT * FROM users WHERE id = 1",
            "SELECT * FROM users ORDER BY id",
            "SELECT * FROM users LIMIT 10",
            "SELECT * FROM users GROUP BY id",
        ],
    )
    def test_clause_keyword_is_not_an_alias(self, sql):
        assert extract_tables(sql)[0].alias is None

    def test_alias_starting_with_keyword(self):
        tables = extract_tables("SELECT * FROM users asset")
        assert tables[0].alias == "asset"

    def test_no_table(self):
        assert extract_tables("SELECT 1") == []

    def test_empty_input(self):
        assert extract_tables("") == []


# ---------------------------------------------------------------------------
# Schema-qualified and quoted identifiers
# ---------------------------------------------------------------------------


class TestQualifiedNames:
    @pytest.mark.parametrize(
        ("sql", "expected"),
        [
            ("SELECT * FROM public.users", "users"),
            ('SELECT * FROM "public"."Users"', "users"),
            ('SELECT * FROM public."Users"', "users"),
            ('SELECT * FROM "public".users', "users"),
            ('SELECT * FROM "Users"', "users"),
        ],
    )
    def test_schema_is_discarded(self, sql, expected):
        assert extract_tables(sql)[0].name == expected

    def test_quoted_name_with_space_and_alias(self):
        tables = extract_tables('SELECT * FROM public."Order Items" oi')
        assert tables[0].name == "order items"
        assert tables[0].alias == "oi"


# ---------------------------------------------------------------------------
# JOIN clauses
# ---------------------------------------------------------------------------


class TestJoins:
    def test_joins_follow_from_in_source_order(self):
        sql = (
            "SELECT o.id, c.name FROM orders o "
            "JOIN customers c ON o.customer_id = c.id "
            "LEFT JOIN shipments AS s ON s.order_id = o.id"
        )
        tables = extract_tables(sql)
        assert [(t.name, t.alias) for t in tables] == [
            ("orders", "o"),
            ("customers", "c"),
            ("shipments", "s"),
        ]

    def test_join_without_alias(self):
        sql = "SELECT * FROM orders JOIN customers ON orders.customer_id = customers.id"
        tables = extract_tables(sql)
        assert [(t.name, t.alias) for t in tables] == [("orders", None), ("customers", None)]

    def test_schema_qualified_join(self):
        sql = 'SELECT * FROM a JOIN "sales"."Orders" o ON o.a_id = a.id'
        assert [t.name for t in extract_tables(sql)] == ["a", "orders"]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestParseTableReference:
    @pytest.mark.parametrize(
        ("reference", "expected"),
        [
            ("users", "users"),
            ('"Users"', "Users"),
            ("public.users", "users"),
            ('"public"."Users"', "Users"),
            ('public."my.table"', "my.table"),
        ],
    )
    def test_table_part(self, reference, expected):
        assert parse_table_reference(reference) == expected


class TestExtractPrimaryTableName:
    def test_keeps_casing(self):
        assert extract_primary_table_name('SELECT * FROM public."Users"') == "Users"

    def test_bare_name(self):
        assert extract_primary_table_name("select id from orders o") == "orders"

    def test_none_without_from(self):
        assert extract_primary_table_name("SELECT 1") is None
