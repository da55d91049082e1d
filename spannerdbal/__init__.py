from .connection import Connection, Cursor, TransactionScope
from .driver import Driver, load_client
from .errors import (
    Error, Warning, InterfaceError, DatabaseError, InternalError,
    OperationalError, ProgrammingError, IntegrityError, DataError,
    NotSupportedError, ConfigurationError, InvalidArgumentError,
)
from .platform import SpannerPlatform
from .remote import RemoteDatabase
from .statement import Statement
from .types import (
    SKIPPED, ParameterType,
    Date, Time, Timestamp, DateFromTicks, TimeFromTicks, TimestampFromTicks,
    Binary, STRING, BINARY, NUMBER, DATETIME, ROWID,
)

# DB-API 2.0 Globals
apilevel = "2.0"
threadsafety = 1  # Threads may share the module, but not connections
paramstyle = "named"  # We accept named (:name) or qmark (?) and rewrite to @name for Spanner


def connect(dsn=None, **kwargs):
    """Open a Connection to a Spanner database.

    Required keyword arguments are ``instance`` and ``dbname`` (``dsn`` is
    accepted as an alias for ``dbname``). Optional: ``project``,
    ``credentials`` (service-account key file), ``reject_unconditioned_writes``
    and ``stmt_cache_size``.
    """
    if dsn is not None:
        kwargs.setdefault("dbname", dsn)
    return Driver().connect(kwargs)
