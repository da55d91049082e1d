import collections
import logging

from .errors import InvalidArgumentError, NotSupportedError, ProgrammingError
from .platform import SpannerPlatform
from .statement import Statement
from .types import SKIPPED, ParameterType

logger = logging.getLogger(__name__)


class TransactionScope:
    """Write helpers bound to one open remote transaction.

    Handed to the callback of Connection.run_in_transaction(); everything
    issued through it commits or fails together. Schema changes cannot join
    the unit and raise NotSupportedError.
    """

    def __init__(self, connection, transaction):
        self._connection = connection
        self.transaction = transaction

    def exec(self, sql):
        if self._connection.is_ddl_statement(sql):
            raise NotSupportedError(f"Schema changes cannot run inside a transaction: {sql.strip()}")
        logger.debug("execute_update %s", sql)
        return self.transaction.execute_update(sql)

    def update(self, table, data, identifier):
        return self.exec(self._connection._update_sql(table, data, identifier))

    def delete(self, table, identifier):
        return self.exec(self._connection._delete_sql(table, identifier))


class Cursor:
    def __init__(self, connection):
        self._connection = connection
        self._stmt = None
        self._rows = collections.deque()
        self.description = None
        self.rowcount = -1
        self.lastrowid = None
        self.arraysize = 1
        self._closed = False

    def close(self):
        if self._closed:
            return
        self._stmt = None
        self._rows.clear()
        self.description = None
        self._closed = True

    def execute(self, operation, parameters=None):
        if self._closed:
            raise ProgrammingError("Cursor is closed")
        self._stmt = None
        self._rows.clear()
        self.description = None
        self.rowcount = -1

        if self._connection.is_ddl_statement(operation):
            self._connection._skip_ddl(operation)
            return

        stmt = self._connection.prepare(operation)
        # Rows stay with this cursor; the cached statement is shared.
        result = stmt.run(parameters)
        self._stmt = stmt
        self._rows.extend(result.rows)
        if result.columns:
            self.description = [(name, None, None, None, None, None, None) for name in result.columns]
        self.rowcount = result.rowcount

    def executemany(self, operation, seq_of_parameters):
        total = 0
        for params in seq_of_parameters:
            self.execute(operation, params)
            if self.rowcount > 0:
                total += self.rowcount
        self.rowcount = total

    def fetchone(self):
        if self._closed:
            raise ProgrammingError("Cursor is closed")
        if not self._rows:
            return None
        return self._rows.popleft()

    def fetchmany(self, size=None):
        if size is None:
            size = self.arraysize
        rows = []
        for _ in range(size):
            r = self.fetchone()
            if r is None:
                break
            rows.append(r)
        return rows

    def fetchall(self):
        rows = []
        while True:
            r = self.fetchone()
            if r is None:
                break
            rows.append(r)
        return rows

    def setinputsizes(self, sizes):
        pass

    def setoutputsize(self, size, column=None):
        pass

    def __iter__(self):
        return self

    def __next__(self):
        r = self.fetchone()
        if r is None:
            raise StopIteration
        return r


class Connection:
    """Relational operations translated for one Spanner database.

    ``database`` is a RemoteDatabase (or anything with the same
    run_in_transaction/insert/execute_sql surface). Statements prepared
    through this connection are cached by their exact SQL text.
    """

    def __init__(self, database, platform=None, *, reject_unconditioned_writes=True, stmt_cache_size=None):
        self._database = database
        self._platform = platform or SpannerPlatform()
        self.reject_unconditioned_writes = reject_unconditioned_writes

        # Prepared statement cache; unbounded unless stmt_cache_size > 0
        self._stmt_cache = collections.OrderedDict()
        self._stmt_cache_size = stmt_cache_size

        # Statistics for testing
        self._stats = collections.Counter()
        self._closed = False
        self.cursors = []

    @property
    def database(self):
        return self._database

    def get_database_platform(self):
        return self._platform

    def _check_open(self):
        if self._closed:
            raise ProgrammingError("Connection closed")

    def prepare(self, sql):
        self._check_open()
        stmt = self._stmt_cache.get(sql)
        if stmt is not None:
            self._stats['cache_hit'] += 1
            if self._stmt_cache_size:
                self._stmt_cache.move_to_end(sql)
            return stmt

        self._stats['cache_miss'] += 1
        self._stats['prepare_count'] += 1
        stmt = Statement(self._database, sql, self._platform)
        self._stmt_cache[sql] = stmt

        # Evict if bounded and full
        if self._stmt_cache_size:
            while len(self._stmt_cache) > self._stmt_cache_size:
                evicted, _ = self._stmt_cache.popitem(last=False)
                logger.debug("statement cache evicted %r", evicted)
        return stmt

    def query(self, sql, params=None):
        self._check_open()
        if self.is_ddl_statement(sql):
            return self._skip_ddl(sql)

        stmt = self.prepare(sql)
        stmt.execute(params)
        return stmt

    def exec(self, sql):
        self._check_open()
        if self.is_ddl_statement(sql):
            return self._skip_ddl(sql)

        def work(transaction):
            return TransactionScope(self, transaction).exec(sql)

        return self._database.run_in_transaction(work)

    def run_in_transaction(self, work, *args, **kwargs):
        """Run ``work(scope, *args, **kwargs)`` in one atomic remote transaction.

        The transaction commits when ``work`` returns and is discarded if it
        raises. The remote client may call ``work`` again when Spanner aborts
        the transaction, so ``work`` must not have side effects outside it.
        """
        self._check_open()

        def unit(transaction):
            return work(TransactionScope(self, transaction), *args, **kwargs)

        return self._database.run_in_transaction(unit)

    def insert(self, table, data):
        # The insert mutation is applied atomically by the client on its own.
        self._check_open()
        return self._database.insert(table, data)

    def update(self, table, data, identifier):
        return self.exec(self._update_sql(table, data, identifier))

    def delete(self, table, identifier):
        return self.exec(self._delete_sql(table, identifier))

    def _update_sql(self, table, data, identifier):
        if not identifier and self.reject_unconditioned_writes:
            raise InvalidArgumentError.from_empty_criteria()
        return self._platform.update_sql(table, data, identifier)

    def _delete_sql(self, table, identifier):
        if not identifier:
            raise InvalidArgumentError.from_empty_criteria()
        return self._platform.delete_sql(table, identifier)

    def quote(self, value, type_=ParameterType.STRING):
        return self._platform.quote(value, type_)

    def is_ddl_statement(self, sql):
        return self._platform.is_ddl_statement(sql)

    def _skip_ddl(self, sql):
        # TODO: send schema changes through Database.update_ddl and poll the
        # returned long-running operation.
        logger.warning("Schema change not sent to Spanner: %s", sql.strip())
        return SKIPPED

    def last_insert_id(self, name=None):
        raise NotSupportedError.not_implemented("Connection.last_insert_id")

    def begin_transaction(self):
        raise NotSupportedError.not_implemented("Connection.begin_transaction")

    def commit(self):
        raise NotSupportedError.not_implemented("Connection.commit")

    def rollback(self):
        raise NotSupportedError.not_implemented("Connection.rollback")

    def error_code(self):
        raise NotSupportedError.not_implemented("Connection.error_code")

    def error_info(self):
        raise NotSupportedError.not_implemented("Connection.error_info")

    def cursor(self):
        self._check_open()
        c = Cursor(self)
        self.cursors.append(c)
        return c

    def execute(self, operation, parameters=None):
        # Convenience method
        c = self.cursor()
        c.execute(operation, parameters)
        return c

    def close(self):
        if self._closed:
            return
        for c in self.cursors:
            c.close()
        self._stmt_cache.clear()
        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self):
        return f"<Connection {getattr(self._database, 'name', self._database)!r}>"
