from sqlalchemy import types as sqltypes
from sqlalchemy.engine import default
from sqlalchemy import exc
from sqlalchemy import text

import spannerdbal

from sqlalchemy.sql import compiler


class SpannerCompiler(compiler.SQLCompiler):
    def limit_clause(self, select, **kw):
        clause = ""
        if select._limit_clause is not None:
            clause += "\n LIMIT " + self.process(select._limit_clause, **kw)
        if select._offset_clause is not None:
            if select._limit_clause is None:
                # GoogleSQL only accepts OFFSET after a LIMIT
                clause += "\n LIMIT " + str(0x7FFFFFFFFFFFFFFF)
            clause += " OFFSET " + self.process(select._offset_clause, **kw)
        return clause

    def returning_clause(self, stmt, returning_cols, **kw):
        # THEN RETURN needs a read-write transaction result set, which the
        # driver does not surface.
        raise exc.CompileError("Spanner dialect does not support RETURNING")


class SpannerTypeCompiler(compiler.GenericTypeCompiler):
    def visit_integer(self, type_, **kw):
        return "INT64"

    def visit_big_integer(self, type_, **kw):
        return "INT64"

    def visit_small_integer(self, type_, **kw):
        return "INT64"

    def visit_boolean(self, type_, **kw):
        return "BOOL"

    def visit_float(self, type_, **kw):
        return "FLOAT64"

    def visit_numeric(self, type_, **kw):
        return "NUMERIC"

    def visit_string(self, type_, **kw):
        return f"STRING({type_.length or 'MAX'})"

    def visit_text(self, type_, **kw):
        return "STRING(MAX)"

    def visit_unicode(self, type_, **kw):
        return self.visit_string(type_, **kw)

    def visit_unicode_text(self, type_, **kw):
        return self.visit_text(type_, **kw)

    def visit_large_binary(self, type_, **kw):
        return f"BYTES({type_.length or 'MAX'})"

    def visit_date(self, type_, **kw):
        return "DATE"

    def visit_datetime(self, type_, **kw):
        return "TIMESTAMP"

    def visit_JSON(self, type_, **kw):
        return "JSON"

    def visit_uuid(self, type_, **kw):
        return "STRING(36)"


_INFORMATION_SCHEMA_TYPES = {
    "INT64": sqltypes.BigInteger,
    "BOOL": sqltypes.Boolean,
    "FLOAT64": sqltypes.Float,
    "NUMERIC": sqltypes.Numeric,
    "DATE": sqltypes.Date,
    "TIMESTAMP": sqltypes.DateTime,
    "JSON": sqltypes.JSON,
}


def _map_type(spanner_type):
    t = (spanner_type or "").upper()
    if t.startswith("STRING"):
        return sqltypes.String()
    if t.startswith("BYTES"):
        return sqltypes.LargeBinary()
    if t.startswith("ARRAY"):
        return sqltypes.NULLTYPE
    cls = _INFORMATION_SCHEMA_TYPES.get(t)
    return cls() if cls is not None else sqltypes.NULLTYPE


class SpannerDialect(default.DefaultDialect):
    name = "spanner"
    driver = "dbal"
    supports_alter = False
    supports_pk_autoincrement = False
    supports_sequences = False
    supports_default_values = False
    supports_empty_insert = False
    supports_unicode_statements = True
    supports_unicode_binds = True
    supports_statement_cache = True
    supports_native_boolean = True
    supports_native_decimal = True
    postfetch_lastrowid = False

    # Prevent SQLAlchemy from emitting implicit RETURNING.
    implicit_returning = False

    default_paramstyle = "named"

    statement_compiler = SpannerCompiler
    type_compiler_cls = SpannerTypeCompiler

    @classmethod
    def import_dbapi(cls):
        return spannerdbal

    def create_connect_args(self, url):
        # spanner+dbal://<project>/<dbname>?instance=<instance>
        opts = dict(url.query)
        if url.host:
            opts.setdefault("project", url.host)
        if url.database:
            opts["dbname"] = url.database
        return ([], opts)

    # Every statement commits in its own atomic scope on the server.
    def do_begin(self, dbapi_connection):
        pass

    def do_commit(self, dbapi_connection):
        pass

    def do_rollback(self, dbapi_connection):
        pass

    def do_close(self, dbapi_connection):
        dbapi_connection.close()

    def get_isolation_level(self, dbapi_connection):
        return "SERIALIZABLE"

    def get_default_isolation_level(self, dbapi_conn):
        return "SERIALIZABLE"

    def set_isolation_level(self, dbapi_connection, level):
        if level != "SERIALIZABLE":
            raise exc.ArgumentError(f"Invalid isolation level: {level}. Spanner only supports SERIALIZABLE.")

    def _get_server_version_info(self, connection):
        return None

    def _get_default_schema_name(self, connection):
        return ""

    def _schema(self, schema):
        return schema or ""

    def get_table_names(self, connection, schema=None, **kw):
        rows = connection.execute(
            text(
                "SELECT table_name FROM information_schema.tables "
                "WHERE table_schema = :schema AND table_type = 'BASE TABLE' "
                "ORDER BY table_name"
            ),
            {"schema": self._schema(schema)},
        )
        return [r[0] for r in rows]

    def has_table(self, connection, table_name, schema=None, **kw):
        rows = connection.execute(
            text(
                "SELECT table_name FROM information_schema.tables "
                "WHERE table_schema = :schema AND table_name = :table"
            ),
            {"schema": self._schema(schema), "table": table_name},
        )
        return rows.first() is not None

    def get_columns(self, connection, table_name, schema=None, **kw):
        rows = connection.execute(
            text(
                "SELECT column_name, spanner_type, is_nullable "
                "FROM information_schema.columns "
                "WHERE table_schema = :schema AND table_name = :table "
                "ORDER BY ordinal_position"
            ),
            {"schema": self._schema(schema), "table": table_name},
        )
        out = []
        for name, spanner_type, is_nullable in rows:
            out.append(
                {
                    "name": name,
                    "type": _map_type(spanner_type),
                    "nullable": is_nullable == "YES",
                    "default": None,
                }
            )
        return out

    def get_pk_constraint(self, connection, table_name, schema=None, **kw):
        rows = connection.execute(
            text(
                "SELECT column_name FROM information_schema.index_columns "
                "WHERE table_schema = :schema AND table_name = :table "
                "AND index_type = 'PRIMARY_KEY' "
                "ORDER BY ordinal_position"
            ),
            {"schema": self._schema(schema), "table": table_name},
        )
        return {"constrained_columns": [r[0] for r in rows], "name": None}

    def get_foreign_keys(self, connection, table_name, schema=None, **kw):
        return []

    def get_indexes(self, connection, table_name, schema=None, **kw):
        return []
