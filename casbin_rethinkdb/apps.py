"""
casbin_rethinkdb Django application initialization.
"""

from django.apps import AppConfig


class CasbinRethinkdbConfig(AppConfig):
    """
    Configuration for the casbin_rethinkdb Django application.

    The app has no models: the policy rules live in RethinkDB. Installing it
    makes the ``load_policies`` management command available. Projects install
    the default settings by calling ``plugin_settings`` from
    ``casbin_rethinkdb.settings.common`` (and ``.production`` in production)
    on their settings module.
    """

    name = "casbin_rethinkdb"
    verbose_name = "Casbin RethinkDB"
