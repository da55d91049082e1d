"""Connection bootstrap: parameters, credentials, instance and database lookup."""

import logging
import os

from google.api_core import exceptions as api_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import spanner
from google.oauth2 import service_account

from .connection import Connection
from .errors import ConfigurationError
from .platform import SpannerPlatform
from .remote import RemoteDatabase

logger = logging.getLogger(__name__)

KEY_FILE_ENV_VARIABLE = "GOOGLE_APPLICATION_CREDENTIALS"


def load_client(project=None, credentials=None):
    """Build a Spanner client.

    ``credentials`` is the path of a service-account key file; when omitted
    the path is read from GOOGLE_APPLICATION_CREDENTIALS, and when that is
    unset too the client falls back to application default credentials.
    """
    key_file = credentials or os.environ.get(KEY_FILE_ENV_VARIABLE)
    try:
        if key_file:
            creds = service_account.Credentials.from_service_account_file(key_file)
            return spanner.Client(project=project or creds.project_id, credentials=creds)
        return spanner.Client(project=project)
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Cannot load Spanner credentials from '{key_file}': {e}") from e
    except auth_exceptions.GoogleAuthError as e:
        raise ConfigurationError(str(e)) from e


def _database_id(name):
    # projects/<p>/instances/<i>/databases/<d>
    return name.rsplit("/", 1)[-1]


class Driver:
    name = "gcp-spanner"

    def __init__(self, client_factory=None):
        self._client_factory = client_factory or load_client
        self._client = None
        self._instance = None
        self.instance_name = None
        self.database_name = None

    @staticmethod
    def parse_parameters(params):
        """Ensures that the required parameters are present."""
        if not params.get("instance"):
            raise ConfigurationError("Missing parameter 'instance' to connect to Spanner instance.")
        if not params.get("dbname"):
            raise ConfigurationError("Missing parameter 'dbname' to connect to Spanner database.")
        return params["instance"], params["dbname"]

    def get_client(self, project=None, credentials=None):
        if self._client is None:
            self._client = self._client_factory(project=project, credentials=credentials)
        return self._client

    def get_instance(self, instance_name, *, project=None, credentials=None):
        if self._instance is None or self.instance_name != instance_name:
            client = self.get_client(project, credentials)
            instance = client.instance(instance_name)
            try:
                exists = instance.exists()
            except api_exceptions.GoogleAPICallError as e:
                raise ConfigurationError(f"Cannot reach instance '{instance_name}': {e}") from e
            if not exists:
                raise ConfigurationError(f"Instance '{instance_name}' does not exist.")
            self.instance_name = instance_name
            self._instance = instance
        return self._instance

    def list_databases(self, instance_name=None):
        """Names of the databases on an instance (last path segment only)."""
        instance = self.get_instance(instance_name or self.instance_name)
        return [_database_id(db.name) for db in instance.list_databases()]

    def select_database(self, database_name):
        """Selects a database if it exists."""
        if database_name not in self.list_databases(self.instance_name):
            raise ConfigurationError(
                f"Database '{database_name}' does not exist on instance '{self.instance_name}'."
            )
        self.database_name = database_name
        return self._instance.database(database_name)

    def get_database_platform(self):
        return SpannerPlatform()

    def connect(self, params):
        instance_name, database_name = self.parse_parameters(params)
        self.get_instance(
            instance_name,
            project=params.get("project"),
            credentials=params.get("credentials"),
        )
        database = self.select_database(database_name)
        logger.debug("connected to %s/%s", instance_name, database_name)

        connection_opts = {}
        if "reject_unconditioned_writes" in params:
            connection_opts["reject_unconditioned_writes"] = _as_bool(params["reject_unconditioned_writes"])
        if params.get("stmt_cache_size") is not None:
            connection_opts["stmt_cache_size"] = int(params["stmt_cache_size"])
        return Connection(RemoteDatabase(database), self.get_database_platform(), **connection_opts)


def _as_bool(value):
    # URL query values arrive as strings
    if isinstance(value, str):
        return value.strip().lower() not in {"0", "false", "no", "off"}
    return bool(value)
