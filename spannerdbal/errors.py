# DB-API 2.0 exception hierarchy
class Error(Exception):
    pass

class Warning(Exception):
    pass

class InterfaceError(Error):
    pass

class DatabaseError(Error):
    pass

class InternalError(DatabaseError):
    pass

class OperationalError(DatabaseError):
    pass

class ProgrammingError(DatabaseError):
    pass

class IntegrityError(DatabaseError):
    pass

class DataError(DatabaseError):
    pass

class NotSupportedError(DatabaseError):
    @classmethod
    def not_implemented(cls, method):
        return cls(f"{method} not implemented.")

class ConfigurationError(InterfaceError):
    """Connection parameters are missing or point at nothing that exists."""

class InvalidArgumentError(ProgrammingError):
    @classmethod
    def from_empty_criteria(cls):
        return cls("Empty criteria was used, expected non-empty criteria")
