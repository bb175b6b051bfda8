"""Django management command to load policies into the RethinkDB policy table.

The command supports:
- Specifying the path to the Casbin policy file (required).
- Specifying the Casbin model configuration file. Default is the ``CASBIN_MODEL`` setting.
- Optionally clearing the existing rules in RethinkDB before loading new ones.
"""

import os

import casbin
import click
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from casbin_rethinkdb.engine.enforcer import AuthzEnforcer
from casbin_rethinkdb.engine.exceptions import PolicyStoreError
from casbin_rethinkdb.engine.utils import migrate_policy_between_enforcers


class Command(BaseCommand):
    """Django management command to load policies into RethinkDB.

    This command reads policies from a Casbin policy file and adds the ones
    missing from the RethinkDB policy table through the RethinkDB-backed
    enforcer.

    Example Usage:
        python manage.py load_policies --policy-file-path /path/to/authz.policy
        python manage.py load_policies --policy-file-path /path/to/authz.policy --model-file-path /path/to/model.conf
        python manage.py load_policies --policy-file-path /path/to/authz.policy --clear-existing
    """

    help = "Load policies from a Casbin policy file into the RethinkDB policy table."

    def add_arguments(self, parser) -> None:
        """Add command-line arguments to the argument parser.

        Args:
            parser: The Django argument parser instance to configure.
        """
        parser.add_argument(
            "--policy-file-path",
            type=str,
            required=True,
            help="Path to the Casbin policy file (CSV format with policies and grouping rules)",
        )
        parser.add_argument(
            "--model-file-path",
            type=str,
            default=None,
            help="Path to the Casbin model configuration file. Defaults to the CASBIN_MODEL setting.",
        )
        parser.add_argument(
            "--clear-existing",
            action="store_true",
            help="Flag to clear existing policies before loading new ones",
        )

    def handle(self, *args, **options):
        """Execute the policy loading command.

        Args:
            *args: Positional command arguments (unused).
            **options: Command options including 'policy_file_path', 'model_file_path', and 'clear_existing'.

        Raises:
            CommandError: If a file is not found or loading fails.
        """
        policy_file_path = options["policy_file_path"]
        model_file_path = options.get("model_file_path") or settings.CASBIN_MODEL

        if not os.path.isfile(policy_file_path):
            raise CommandError(f"Policy file not found: {policy_file_path}")
        if not os.path.isfile(model_file_path):
            raise CommandError(f"Model file not found: {model_file_path}")

        try:
            target_enforcer = AuthzEnforcer.get_enforcer()

            if options.get("clear_existing"):
                if click.confirm(
                    click.style(
                        "Do you want to delete every rule stored in RethinkDB?",
                        fg="yellow",
                        bold=True,
                    ),
                    default=False,
                ):
                    self._clear_existing_policies(target_enforcer)

            source_enforcer = casbin.Enforcer(model_file_path, policy_file_path)
            migrated = self.migrate_policies(source_enforcer, target_enforcer)
        except PolicyStoreError as e:
            raise CommandError(f"Failed to load policies: {e}") from e

        self.stdout.write(self.style.SUCCESS(f"Loaded {migrated} new rules from {policy_file_path}"))

    def migrate_policies(self, source_enforcer, target_enforcer) -> int:
        """Migrate policies from the source enforcer to the target enforcer.

        Args:
            source_enforcer: The Casbin enforcer instance to migrate policies from.
            target_enforcer: The Casbin enforcer instance to migrate policies to.

        Returns:
            int: Number of rules added to the target.
        """
        return migrate_policy_between_enforcers(source_enforcer, target_enforcer)

    def _clear_existing_policies(self, target_enforcer):
        """Delete every rule from the target enforcer and its storage.

        Args:
            target_enforcer: The Casbin enforcer instance to clear.
        """
        target_enforcer.clear_policy()
        target_enforcer.save_policy()
        click.echo("Deleted existing policies")
