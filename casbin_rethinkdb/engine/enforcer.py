"""
Casbin enforcer backed by RethinkDB.

Provides a Casbin SyncedEnforcer instance whose policy rules are stored in
RethinkDB through the RethinkAdapter.

Components:
    - Enforcer: Main SyncedEnforcer instance for policy evaluation
    - Adapter: RethinkAdapter for policy storage
    - Connection: The RethinkDB connection the enforcer owns

Usage:
    from casbin_rethinkdb.engine.enforcer import AuthzEnforcer
    allowed = AuthzEnforcer.get_enforcer().enforce(user, resource, action)

Requires the `CASBIN_MODEL` and `CASBIN_RETHINKDB_*` settings.
"""

import logging

from casbin import SyncedEnforcer
from django.conf import settings
from rethinkdb import r

from casbin_rethinkdb.engine.adapter import DEFAULT_DATABASE, DEFAULT_TABLE, RethinkAdapter

logger = logging.getLogger(__name__)


class AuthzEnforcer:
    """Singleton class to manage the Casbin SyncedEnforcer instance.

    The first call to ``get_enforcer`` opens a RethinkDB connection, builds the
    RethinkAdapter on it and loads the policy. The connection belongs to this
    class: ``close`` releases the adapter and the connection, and the next
    ``get_enforcer`` starts over.

    Attributes:
        _enforcer (SyncedEnforcer): The singleton enforcer instance.
        _adapter (RethinkAdapter): The singleton adapter instance.
        _connection: The RethinkDB connection opened for the adapter.
    """

    _enforcer = None
    _adapter = None
    _connection = None

    def __new__(cls):
        """Singleton pattern to ensure a single enforcer instance."""
        return cls.get_enforcer()

    @classmethod
    def get_enforcer(cls) -> SyncedEnforcer:
        """Get the enforcer instance, creating it if needed.

        Returns:
            SyncedEnforcer: The singleton enforcer instance.
        """
        if cls._enforcer is None:
            cls._enforcer = cls._initialize_enforcer()
            cls.configure_enforcer_auto_save_and_load()
        return cls._enforcer

    @classmethod
    def get_adapter(cls) -> RethinkAdapter:
        """Get the adapter instance, initializing the enforcer if needed.

        Returns:
            RethinkAdapter: The singleton adapter instance.
        """
        if cls._adapter is None:
            cls.get_enforcer()
        return cls._adapter

    @classmethod
    def configure_enforcer_auto_save_and_load(cls):
        """Configure auto-load and auto-save on the enforcer from the settings.

        Returns:
            None
        """
        auto_load_policy_interval = getattr(settings, "CASBIN_AUTO_LOAD_POLICY_INTERVAL", 0)
        auto_save_policy = getattr(settings, "CASBIN_AUTO_SAVE_POLICY", True)

        if auto_load_policy_interval > 0:
            if not cls._enforcer.is_auto_loading_running():
                cls._enforcer.start_auto_load_policy(auto_load_policy_interval)
        else:
            logger.warning("CASBIN_AUTO_LOAD_POLICY_INTERVAL is not set or zero; auto-load is disabled.")

        cls._enforcer.enable_auto_save(auto_save_policy)

    @classmethod
    def close(cls):
        """Stop the enforcer and release the adapter and the connection.

        Safe to call when no enforcer has been created.

        Returns:
            None
        """
        if cls._enforcer is not None:
            cls._enforcer.stop_auto_load_policy()
        if cls._adapter is not None:
            cls._adapter.close()
        if cls._connection is not None:
            cls._connection.close()
            logger.info("Closed RethinkDB connection used by the enforcer")
        cls._enforcer = None
        cls._adapter = None
        cls._connection = None

    @classmethod
    def _connect(cls):
        """Open the RethinkDB connection described by the settings."""
        host = getattr(settings, "CASBIN_RETHINKDB_HOST", "localhost")
        port = getattr(settings, "CASBIN_RETHINKDB_PORT", 28015)
        connection = r.connect(
            host=host,
            port=port,
            user=getattr(settings, "CASBIN_RETHINKDB_USER", "admin"),
            password=getattr(settings, "CASBIN_RETHINKDB_PASSWORD", ""),
        )
        logger.info(f"Connected to RethinkDB at {host}:{port}")
        return connection

    @classmethod
    def _initialize_enforcer(cls) -> SyncedEnforcer:
        """
        Create and configure the Casbin SyncedEnforcer instance.

        Returns:
            SyncedEnforcer: Configured Casbin enforcer with the RethinkDB adapter.
        """
        database = getattr(settings, "CASBIN_RETHINKDB_DATABASE", DEFAULT_DATABASE)
        table = getattr(settings, "CASBIN_RETHINKDB_TABLE", DEFAULT_TABLE)

        connection = cls._connect()
        try:
            adapter = RethinkAdapter(connection, database, table)
            enforcer = SyncedEnforcer(settings.CASBIN_MODEL, adapter)
        except Exception as e:
            logger.error(f"Failed to initialize Casbin enforcer on RethinkDB table '{database}.{table}': {e}")
            connection.close()
            raise

        cls._connection = connection
        cls._adapter = adapter
        return enforcer
