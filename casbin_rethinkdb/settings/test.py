"""
Test settings for the casbin_rethinkdb app.
"""

import os

from casbin_rethinkdb import ROOT_DIRECTORY


def plugin_settings(settings):  # pylint: disable=unused-argument
    """
    Configure the app for tests.

    The module-level values below are used directly as the test settings.

    Args:
        settings: The Django settings object
    """


INSTALLED_APPS = (
    "casbin_rethinkdb.apps.CasbinRethinkdbConfig",
)

SECRET_KEY = "test-secret-key"

USE_TZ = True

# Casbin configuration
CASBIN_MODEL = os.path.join(ROOT_DIRECTORY, "engine", "config", "model.conf")
CASBIN_AUTO_LOAD_POLICY_INTERVAL = 0
CASBIN_AUTO_SAVE_POLICY = True

# RethinkDB configuration. Tests never open a real connection.
CASBIN_RETHINKDB_HOST = "localhost"
CASBIN_RETHINKDB_PORT = 28015
CASBIN_RETHINKDB_USER = "admin"
CASBIN_RETHINKDB_PASSWORD = ""
CASBIN_RETHINKDB_DATABASE = "casbin_test"
CASBIN_RETHINKDB_TABLE = "casbin_rule"
