import datetime
import enum


class ParameterType(enum.Enum):
    """Declared type of a value handed to Connection.quote()."""
    NULL = "null"
    INTEGER = "integer"
    STRING = "string"
    BINARY = "binary"
    BOOLEAN = "boolean"
    DATE = "date"
    TIMESTAMP = "timestamp"


class _Skipped:
    """Result of an operation that deliberately did no remote work.

    Falsy, so callers testing ``if result:`` treat it like an empty result.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return "SKIPPED"


SKIPPED = _Skipped()

# DB-API type objects and constructors
Date = datetime.date
Time = datetime.time
Timestamp = datetime.datetime
def DateFromTicks(ticks): return datetime.date.fromtimestamp(ticks)
def TimeFromTicks(ticks): return datetime.datetime.fromtimestamp(ticks).time()
def TimestampFromTicks(ticks): return datetime.datetime.fromtimestamp(ticks)
def Binary(string): return bytes(string)
STRING = str
BINARY = bytes
NUMBER = float
DATETIME = datetime.datetime
ROWID = int
