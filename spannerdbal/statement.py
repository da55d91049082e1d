import collections.abc
import json
import logging
import re

from .errors import ProgrammingError
from .remote import param_types_for

logger = logging.getLogger(__name__)

# Spanner uses @name placeholders. Callers (and SQLAlchemy) hand us either
# qmark (?) or named (:name) styles, which are rewritten here.
_NAMED_RE = re.compile(r'(?<![:\w]):([a-zA-Z_][a-zA-Z0-9_]*)')

StatementResult = collections.namedtuple("StatementResult", ["columns", "rows", "rowcount"])


def _format_params_for_log(params, *, max_items=50, max_str=200):
    if params is None:
        return None
    out = {}
    for i, (k, v) in enumerate(params.items()):
        if i >= max_items:
            out["_truncated"] = True
            break
        if isinstance(v, (bytes, bytearray)):
            v = {"_type": "bytes", "len": len(v)}
        elif not isinstance(v, (bool, int, float, type(None))):
            v = str(v)
            if len(v) > max_str:
                v = v[:max_str] + "…"
        out[str(k)] = v
    return out


def _convert_params(sql, params):
    """Rewrite placeholders to @name and return (sql, params_dict)."""
    if params is None:
        return sql, {}

    if isinstance(params, collections.abc.Mapping):
        # Reject mixed placeholder styles early.
        if '?' in sql:
            raise ProgrammingError("Mixed parameter styles are not supported: got named parameters with qmark placeholders")

        new_params = {}

        def replace(match):
            name = match.group(1)
            if name not in params:
                raise ProgrammingError(f"Missing parameter '{name}'")
            new_params[name] = params[name]
            return f"@{name}"

        new_sql = _NAMED_RE.sub(replace, sql)
        # Parameters already written as @name pass through untouched.
        for name, value in params.items():
            if name not in new_params and f"@{name}" in new_sql:
                new_params[name] = value
        return new_sql, new_params

    if _NAMED_RE.search(sql) is not None:
        raise ProgrammingError("Mixed parameter styles are not supported: got positional parameters with named placeholders")
    params = list(params)
    parts = sql.split('?')
    if len(parts) - 1 != len(params):
        raise ProgrammingError(f"Incorrect number of parameters: expected {len(parts)-1}, got {len(params)}")
    new_sql = parts[0]
    new_params = {}
    for i, value in enumerate(params, start=1):
        new_sql += f"@p{i}" + parts[i]
        new_params[f"p{i}"] = value
    return new_sql, new_params


class Statement:
    """A prepared statement bound to its SQL text and the remote database.

    Instances are shared through Connection.prepare(), so parameters bound
    with bind_value() stay bound until close_cursor().
    """

    def __init__(self, database, sql, platform):
        self._database = database
        self._platform = platform
        self.sql = sql
        self._bound = {}
        self._positional = {}
        self.executed = False
        self.columns = []
        self._rows = collections.deque()
        self.rowcount = -1

    def bind_value(self, param, value):
        """Bind a named (``"id"`` or ``":id"``) or positional (1-based) parameter."""
        if isinstance(param, int):
            if param < 1:
                raise ProgrammingError(f"Positional parameters are 1-based, got {param}")
            self._positional[param] = value
        else:
            self._bound[param.lstrip(":@")] = value

    def _merged_params(self, params):
        if self._positional:
            if self._bound or isinstance(params, collections.abc.Mapping):
                raise ProgrammingError("Mixed parameter styles are not supported")
            merged = [self._positional[i] for i in sorted(self._positional)]
            return merged + list(params or [])
        if params is None:
            return dict(self._bound) if self._bound else None
        if isinstance(params, collections.abc.Mapping):
            return {**self._bound, **params}
        if self._bound:
            raise ProgrammingError("Mixed parameter styles are not supported")
        return params

    def run(self, params=None):
        """Execute and return a StatementResult, leaving this statement's own
        row buffer alone."""
        sql, spanner_params = _convert_params(self.sql, self._merged_params(params))

        if self._platform.is_read_statement(sql):
            result = self._database.execute_sql(sql, spanner_params)
            return StatementResult(list(result.columns), list(result.rows), -1)

        types = param_types_for(spanner_params)

        def work(transaction):
            return transaction.execute_update(sql, params=spanner_params or None, param_types=types)

        logger.debug("execute_update %s params=%s", sql,
                     json.dumps(_format_params_for_log(spanner_params), default=str))
        return StatementResult([], [], self._database.run_in_transaction(work))

    def execute(self, params=None):
        result = self.run(params)
        self._rows.clear()
        self.columns = result.columns
        self._rows.extend(result.rows)
        self.rowcount = result.rowcount
        self.executed = True
        return True

    @property
    def description(self):
        if not self.columns:
            return None
        return [(name, None, None, None, None, None, None) for name in self.columns]

    def column_count(self):
        return len(self.columns)

    def fetchone(self):
        if not self.executed:
            raise ProgrammingError("Statement has not been executed")
        if not self._rows:
            return None
        return self._rows.popleft()

    def fetchall(self):
        rows = []
        while True:
            r = self.fetchone()
            if r is None:
                break
            rows.append(r)
        return rows

    def close_cursor(self):
        self._bound.clear()
        self._positional.clear()
        self._rows.clear()
        self.columns = []
        self.rowcount = -1
        self.executed = False
        return True

    def __iter__(self):
        return self

    def __next__(self):
        r = self.fetchone()
        if r is None:
            raise StopIteration
        return r

    def __repr__(self):
        return f"<Statement {self.sql!r}>"
