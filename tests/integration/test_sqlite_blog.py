"""Integration test for the SQLite workflow.

Covers: settings, sessions, the query builder, identity mapping, scoped
saving and bulk statements end-to-end against a SQLite database file.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from row_map import (
    Comparator,
    Connection,
    ConnectionConfig,
    Entity,
    QueryType,
    Session,
    Settings,
    entity,
    new_query,
)

# --- Test entities ---


class Customer(Entity):
    __entity__ = (
        entity("customers").key("id").field("name").readable("email").writable("secret").build()
    )


class Order(Entity):
    __entity__ = (
        entity("orders")
        .key("id")
        .field("amount")
        .field("status")
        .reference("customer", Customer)
        .reference("replaces", "Order")
        .build()
    )


SCHEMA = [
    "CREATE TABLE customers (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT NOT NULL, "
    "email TEXT, secret TEXT)",
    "CREATE TABLE orders (id INTEGER PRIMARY KEY AUTOINCREMENT, "
    "customer INTEGER REFERENCES customers(id), replaces INTEGER REFERENCES orders(id), "
    "amount REAL NOT NULL, status TEXT DEFAULT 'pending')",
]


# --- Fixtures ---


@pytest.fixture
def database(tmp_path: Path) -> ConnectionConfig:
    """A SQLite database file with the schema and a few rows."""
    config = ConnectionConfig(driver="sqlite", database=str(tmp_path / "shop.db"))
    with Connection(config) as conn:
        for statement in SCHEMA:
            conn.execute(statement)
        with Session(conn) as session:
            customers = session.store(Customer)
            ada = customers.insert({"name": "Ada", "email": "ada@example.com"})
            grace = customers.insert({"name": "Grace", "email": "grace@example.com"})
            orders = session.store(Order)
            first = orders.insert({"customer": ada, "amount": 10.0})
            orders.insert({"customer": ada, "amount": 25.5, "replaces": first})
            orders.insert({"customer": grace, "amount": 7.25, "status": "shipped"})
    return config


# --- Integration Tests ---


@pytest.mark.integration
class TestSqliteSession:
    """Identity mapping and persistence across sessions on one file."""

    def test_changes_persist_across_sessions(self, database: ConnectionConfig) -> None:
        with Session.from_config(database) as session:
            order = session.get(Order, 2)
            order.status = "paid"
            order.customer.name = "Ada L."

        with Session.from_config(database) as session:
            order = session.get(Order, 2)
            assert order.status == "paid"
            assert order.customer.name == "Ada L."
            assert order.replaces.customer is order.customer

    def test_write_only_field(self, database: ConnectionConfig) -> None:
        with Session.from_config(database) as session:
            session.get(Customer, 1).secret = "hunter2"
            raw = session.connection.execute("SELECT secret FROM customers WHERE id = 1")
            assert raw.scalar() is None
            session.flush()
            raw = session.connection.execute("SELECT secret FROM customers WHERE id = 1")
            assert raw.scalar() == "hunter2"

    def test_queries_return_mapped_entities(self, database: ConnectionConfig) -> None:
        with Session.from_config(database) as session:
            ada = session.get(Customer, 1)
            orders = (
                session.store(Order)
                .select()
                .where("customer", Comparator.REFS, ada)
                .desc("amount")
                .find(2)
            )
            assert [o.amount for o in orders] == [25.5, 10.0]
            assert all(o.customer is ada for o in orders)

            pending = session.store(Order).select().where("status", Comparator.EQ, "pending")
            assert pending.count() == 2

    def test_bulk_update_then_release(self, database: ConnectionConfig) -> None:
        with Session.from_config(database) as session:
            orders = session.store(Order)
            cached = orders.by_key(3)
            orders.bulk_update({"status": "archived"}).where(
                "status", Comparator.EQ, "shipped"
            ).execute()
            assert cached.status == "shipped"
            orders.release(3)
            assert orders.by_key(3).status == "archived"

    def test_pagination(self, database: ConnectionConfig) -> None:
        with Session.from_config(database) as session:
            orders = list(session.store(Order).select().asc("id").skip(1).all())
            assert [o.pk for o in orders] == [2, 3]


@pytest.mark.integration
class TestSqliteBuilder:
    """Raw builder statements against the same database."""

    def test_select_update_delete_count(self, database: ConnectionConfig) -> None:
        with Connection(database) as conn:
            rows = (
                new_query(QueryType.SELECT, "orders", [("orders", "id"), "amount"], connection=conn)
                .where("amount", Comparator.GT, 8)
                .asc("id")
                .execute()
                .fetch_all()
            )
            assert rows == [{"id": 1, "amount": 10.0}, {"id": 2, "amount": 25.5}]

            updated = (
                new_query(QueryType.UPDATE, "orders", {"status": "late"}, connection=conn)
                .where("id", Comparator.IN, [1, 3])
                .execute()
            )
            assert updated.rowcount == 2

            deleted = (
                new_query(QueryType.DELETE, "orders", connection=conn)
                .where("status", Comparator.EQ, "late")
                .execute()
            )
            assert deleted.rowcount == 2

            remaining = new_query(QueryType.COUNT, "orders", connection=conn).execute()
            assert remaining.scalar() == 1

    def test_settings_drive_the_connection(
        self, database: ConnectionConfig, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("ROW_MAP_DATABASE", database.database)
        config = Settings(_env_file=None).connection_config()
        with Session.from_config(config) as session:
            assert session.get(Customer, 2).name == "Grace"
