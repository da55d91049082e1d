import pytest
from sqlalchemy.dialects import registry

import spannerdbal
from spannerdbal.remote import ResultSet

registry.register("spanner.dbal", "spannerdbal_sqlalchemy.dialect", "SpannerDialect")
registry.register("spanner", "spannerdbal_sqlalchemy.dialect", "SpannerDialect")


class FakeTransaction:
    def __init__(self, rowcount=1):
        self.rowcount = rowcount
        self.updates = []
        self.commits = 0

    def execute_update(self, sql, params=None, param_types=None):
        self.updates.append((sql, params, param_types))
        return self.rowcount

    def commit(self):
        self.commits += 1


class FakeDatabase:
    """Stands in for RemoteDatabase and records every call."""

    name = "projects/p/instances/i/databases/fake"

    def __init__(self, rowcount=1):
        self.rowcount = rowcount
        self.transactions = []
        self.inserts = []
        self.reads = []
        self.results = {}

    def run_in_transaction(self, work, *args, **kwargs):
        txn = FakeTransaction(self.rowcount)
        self.transactions.append(txn)
        out = work(txn, *args, **kwargs)
        txn.commit()
        return out

    def insert(self, table, row):
        self.inserts.append((table, row))
        return "commit-timestamp"

    def execute_sql(self, sql, params=None):
        self.reads.append((sql, params))
        return self.results.get(sql, ResultSet([], []))

    @property
    def updates(self):
        return [u for t in self.transactions for u in t.updates]


@pytest.fixture
def database():
    return FakeDatabase()


@pytest.fixture
def conn(database):
    c = spannerdbal.Connection(database)
    yield c
    c.close()
