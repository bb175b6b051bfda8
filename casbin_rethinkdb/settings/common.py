"""
Common settings for the casbin_rethinkdb app.
"""

import os

from casbin_rethinkdb import ROOT_DIRECTORY


def plugin_settings(settings):
    """
    Install the default settings of the app.

    Only settings the project has not defined are set, so any of them can be
    overridden in the project settings.

    Args:
        settings: The Django settings object
    """
    # Path to the Casbin model definition used by the enforcer.
    if not hasattr(settings, "CASBIN_MODEL"):
        settings.CASBIN_MODEL = os.path.join(ROOT_DIRECTORY, "engine", "config", "model.conf")

    # RethinkDB connection used to store the policy rules.
    if not hasattr(settings, "CASBIN_RETHINKDB_HOST"):
        settings.CASBIN_RETHINKDB_HOST = "localhost"
    if not hasattr(settings, "CASBIN_RETHINKDB_PORT"):
        settings.CASBIN_RETHINKDB_PORT = 28015
    if not hasattr(settings, "CASBIN_RETHINKDB_USER"):
        settings.CASBIN_RETHINKDB_USER = "admin"
    if not hasattr(settings, "CASBIN_RETHINKDB_PASSWORD"):
        settings.CASBIN_RETHINKDB_PASSWORD = ""

    # Database and table holding the rules. Both are created on first use.
    if not hasattr(settings, "CASBIN_RETHINKDB_DATABASE"):
        settings.CASBIN_RETHINKDB_DATABASE = "casbin"
    if not hasattr(settings, "CASBIN_RETHINKDB_TABLE"):
        settings.CASBIN_RETHINKDB_TABLE = "casbin_rule"

    # How often (in seconds) the enforcer reloads the rules from the database.
    # Zero disables auto-loading.
    if not hasattr(settings, "CASBIN_AUTO_LOAD_POLICY_INTERVAL"):
        settings.CASBIN_AUTO_LOAD_POLICY_INTERVAL = 0

    # Whether policy changes made through the enforcer are written back immediately.
    if not hasattr(settings, "CASBIN_AUTO_SAVE_POLICY"):
        settings.CASBIN_AUTO_SAVE_POLICY = True
