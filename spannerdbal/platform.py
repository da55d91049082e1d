"""SQL text rules for Spanner: DDL detection, literal quoting and the
WHERE/SET fragments used by Connection.update() and Connection.delete().

Values are rendered as GoogleSQL literals. Strings use double quotes with
backslash escapes, bytes use the ``B"..."`` form, dates and timestamps the
typed ``DATE "..."`` and ``TIMESTAMP "..."`` forms.
"""

import datetime
import string

from .types import ParameterType

_DDL_PREFIXES = ("CREATE ", "DROP ", "ALTER ")
_READ_PREFIXES = ("SELECT", "WITH", "(")

_PRINTABLE = frozenset(string.printable.encode("ascii")) - frozenset(b"\t\n\r\x0b\x0c")


def _escape_text(s):
    return s.replace("\\", "\\\\").replace('"', '\\"')


def encode_string(value):
    return '"' + _escape_text(str(value)) + '"'


def encode_binary(value):
    if isinstance(value, str):
        return encode_string(value)
    out = []
    for b in bytes(value):
        if b == 0x5C:
            out.append("\\\\")
        elif b == 0x22:
            out.append('\\"')
        elif b in _PRINTABLE:
            out.append(chr(b))
        else:
            out.append(f"\\x{b:02x}")
    return 'B"' + "".join(out) + '"'


def encode_boolean(value):
    return "TRUE" if value else "FALSE"


def encode_number(value):
    return str(value)


def encode_null(value):
    return "NULL"


def encode_date(value):
    if isinstance(value, datetime.datetime):
        value = value.date()
    if isinstance(value, datetime.date):
        value = value.isoformat()
    return "DATE " + encode_string(value)


def encode_timestamp(value):
    if isinstance(value, datetime.datetime):
        # Naive values are UTC, as in the client's query parameters
        value = value.isoformat() if value.tzinfo else value.isoformat() + "Z"
    elif isinstance(value, datetime.date):
        value = value.isoformat() + "T00:00:00Z"
    return "TIMESTAMP " + encode_string(value)


def infer_type(value):
    """Declared type for a bare Python value."""
    if value is None:
        return ParameterType.NULL
    if isinstance(value, str):
        return ParameterType.STRING
    if isinstance(value, (bytes, bytearray, memoryview)):
        return ParameterType.BINARY
    if isinstance(value, bool):
        return ParameterType.BOOLEAN
    if isinstance(value, datetime.datetime):
        return ParameterType.TIMESTAMP
    if isinstance(value, datetime.date):
        return ParameterType.DATE
    return ParameterType.INTEGER


class SpannerPlatform:
    def __init__(self):
        self._encoders = {
            ParameterType.STRING: encode_string,
            ParameterType.BINARY: encode_binary,
            ParameterType.BOOLEAN: encode_boolean,
            ParameterType.INTEGER: encode_number,
            ParameterType.NULL: encode_null,
            ParameterType.DATE: encode_date,
            ParameterType.TIMESTAMP: encode_timestamp,
        }

    def register_encoder(self, type_, encoder):
        self._encoders[type_] = encoder

    def quote(self, value, type_=ParameterType.STRING):
        # None is NULL whatever the declared type
        if value is None:
            return self._encoders[ParameterType.NULL](value)
        encoder = self._encoders.get(type_, encode_number)
        return encoder(value)

    def quote_value(self, value):
        return self.quote(value, infer_type(value))

    def is_null_expression(self, column):
        return f"{column} IS NULL"

    def is_ddl_statement(self, sql):
        # TRUNCATE, COMMENT ON, GRANT... are not recognised.
        head = sql.lstrip()[:7].upper()
        return head.startswith(_DDL_PREFIXES)

    def is_read_statement(self, sql):
        return sql.lstrip().upper().startswith(_READ_PREFIXES)

    def where_clause(self, identifier):
        """Gathers conditions for an update or delete call.

        Empty input yields an empty string; rejecting it is the caller's job.
        """
        conditions = []
        for column, value in identifier.items():
            if value is not None:
                conditions.append(f"{column} = {self.quote_value(value)}")
            else:
                conditions.append(self.is_null_expression(column))
        return " AND ".join(conditions)

    def set_clause(self, data):
        return ", ".join(f"{column} = {self.quote_value(value)}" for column, value in data.items())

    def update_sql(self, table, data, identifier):
        return f"UPDATE {table} SET {self.set_clause(data)} WHERE {self.where_clause(identifier)}"

    def delete_sql(self, table, identifier):
        return f"DELETE FROM {table} WHERE {self.where_clause(identifier)}"
