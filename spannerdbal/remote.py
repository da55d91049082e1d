import collections
import datetime
import decimal
import logging

from google.cloud.spanner_v1 import param_types

logger = logging.getLogger(__name__)

ResultSet = collections.namedtuple("ResultSet", ["columns", "rows"])


def param_type_for(value):
    """Spanner parameter type for a Python value, or None to let the
    service infer it (NULLs)."""
    if value is None:
        return None
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return param_types.BOOL
    if isinstance(value, int):
        return param_types.INT64
    if isinstance(value, float):
        return param_types.FLOAT64
    if isinstance(value, decimal.Decimal):
        return param_types.NUMERIC
    if isinstance(value, (bytes, bytearray, memoryview)):
        return param_types.BYTES
    if isinstance(value, datetime.datetime):
        return param_types.TIMESTAMP
    if isinstance(value, datetime.date):
        return param_types.DATE
    return param_types.STRING


def param_types_for(params):
    if not params:
        return None
    out = {}
    for name, value in params.items():
        t = param_type_for(value)
        if t is not None:
            out[name] = t
    return out


class RemoteDatabase:
    """Thin adapter over ``google.cloud.spanner_v1.database.Database``.

    Exposes only what Connection needs: an atomic transaction callback,
    the native insert mutation and single-use snapshot reads. Errors raised
    by the client are not caught here.
    """

    def __init__(self, database):
        self._database = database

    @property
    def name(self):
        return self._database.name

    def run_in_transaction(self, work, *args, **kwargs):
        # The client retries aborted transactions and commits after work returns.
        return self._database.run_in_transaction(work, *args, **kwargs)

    def insert(self, table, row):
        columns = list(row.keys())
        values = [list(row.values())]
        logger.debug("insert into %s columns=%s", table, columns)
        with self._database.batch() as batch:
            batch.insert(table=table, columns=columns, values=values)
        return batch.committed

    def execute_sql(self, sql, params=None):
        logger.debug("execute_sql %s", sql)
        with self._database.snapshot() as snapshot:
            results = snapshot.execute_sql(
                sql,
                params=params or None,
                param_types=param_types_for(params),
            )
            rows = [tuple(r) for r in results]
            fields = results.fields or []
        return ResultSet([f.name for f in fields], rows)
