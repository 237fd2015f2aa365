"""TransactionManager 및 SchemaManager 테스트."""

import sqlite3

import pytest

from xkcdvault.services.index.schema import SchemaManager
from xkcdvault.services.index.transaction import TransactionManager


@pytest.fixture
def conn():
    connection = sqlite3.connect(":memory:", isolation_level=None)
    yield connection
    connection.close()


@pytest.fixture
def transactions(conn):
    conn.execute("CREATE TABLE t (x INTEGER)")
    return TransactionManager(conn)


class TestTransactionManager:
    def test_commit(self, conn, transactions):
        with transactions.transaction():
            conn.execute("INSERT INTO t VALUES (1)")

        assert conn.execute("SELECT count(*) FROM t").fetchone()[0] == 1
        assert not conn.in_transaction

    def test_rollback_on_exception(self, conn, transactions):
        with pytest.raises(RuntimeError), transactions.transaction():
            conn.execute("INSERT INTO t VALUES (1)")
            raise RuntimeError("boom")

        assert conn.execute("SELECT count(*) FROM t").fetchone()[0] == 0

    def test_rollback_without_transaction_is_noop(self, transactions):
        transactions.rollback()

    def test_lock_is_released(self, transactions):
        transactions.begin()
        transactions.commit()

        assert not transactions.write_lock.locked()


class TestSchemaManager:
    def test_create_tables_and_read_offline(self, conn):
        schema = SchemaManager(conn)
        with TransactionManager(conn).transaction():
            schema.create_tables(offline=True)

        assert schema.read_offline() is True
        assert conn.execute("SELECT synced_at, last_id FROM sync_watermark").fetchall() == [(0, 0)]

    def test_non_positive_id_is_rejected(self, conn):
        SchemaManager(conn).create_tables(offline=False)

        with pytest.raises(sqlite3.IntegrityError):
            conn.execute(
                "INSERT INTO items VALUES (0, 't', 'u', '', '2020-01-01', '', '', '', NULL)"
            )

    def test_missing_offline_setting(self, conn):
        schema = SchemaManager(conn)
        schema.create_tables(offline=False)
        conn.execute("DELETE FROM settings")

        with pytest.raises(LookupError):
            schema.read_offline()

    def test_missing_tables(self, conn):
        with pytest.raises(sqlite3.OperationalError):
            SchemaManager(conn).read_offline()
