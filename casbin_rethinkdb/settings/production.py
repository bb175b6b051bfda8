"""
Production settings for the casbin_rethinkdb app.
"""

import os


def plugin_settings(settings):
    """
    Read the RethinkDB connection from the environment when it is set there.

    Args:
        settings: The Django settings object
    """
    settings.CASBIN_RETHINKDB_HOST = os.environ.get("CASBIN_RETHINKDB_HOST", settings.CASBIN_RETHINKDB_HOST)
    settings.CASBIN_RETHINKDB_PORT = int(os.environ.get("CASBIN_RETHINKDB_PORT", settings.CASBIN_RETHINKDB_PORT))
    settings.CASBIN_RETHINKDB_USER = os.environ.get("CASBIN_RETHINKDB_USER", settings.CASBIN_RETHINKDB_USER)
    settings.CASBIN_RETHINKDB_PASSWORD = os.environ.get(
        "CASBIN_RETHINKDB_PASSWORD", settings.CASBIN_RETHINKDB_PASSWORD
    )
