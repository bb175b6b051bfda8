"""
Casbin Adapter for RethinkDB.

This module provides the adapter Casbin uses to persist policy rules in a
RethinkDB table. Each rule is stored as one row with a policy type (``ptype``)
and up to five positional values (``v1`` to ``v5``)::

    {"id": "<generated>", "ptype": "p", "v1": "role^admin", "v2": "data^reports", "v3": "read", "v4": "", "v5": ""}

The RethinkAdapter implements the plain, batch, update and filtered adapter
interfaces of Casbin. All queries go through ``RethinkPolicyStore``.
"""

import logging
from enum import Enum
from typing import Optional, Sequence

import attr
from casbin.model import Model
from casbin.persist.adapter_filtered import FilteredAdapter
from casbin.persist.batch_adapter import BatchAdapter
from casbin.persist.update_adapter import UpdateAdapter

from casbin_rethinkdb.engine.exceptions import PolicyStoreError
from casbin_rethinkdb.engine.filter import Filter
from casbin_rethinkdb.engine.store import RethinkPolicyStore

logger = logging.getLogger(__name__)

DEFAULT_DATABASE = "casbin"
DEFAULT_TABLE = "casbin_rule"


class PolicyAttribute(Enum):
    """
    Enumeration of the columns of the policy table.

    The meaning of the value columns depends on the policy type (ptype). Check
    the ``casbin_rethinkdb.engine.filter.Filter`` class for more details.
    """

    PTYPE = "ptype"
    """ptype (str): Type of policy"""

    V1 = "v1"
    """v1 (str): First policy value."""

    V2 = "v2"
    """v2 (str): Second policy value."""

    V3 = "v3"
    """v3 (str): Third policy value."""

    V4 = "v4"
    """v4 (str): Fourth policy value."""

    V5 = "v5"
    """v5 (str): Fifth policy value."""


RULE_ATTRIBUTES = (
    PolicyAttribute.V1,
    PolicyAttribute.V2,
    PolicyAttribute.V3,
    PolicyAttribute.V4,
    PolicyAttribute.V5,
)

MAX_RULE_FIELDS = len(RULE_ATTRIBUTES)


@attr.define
class PolicyRecord:
    """
    One policy rule as stored in the table.

    Rules longer than ``MAX_RULE_FIELDS`` values are truncated when a record
    is built from them; unused trailing values are empty strings.
    """

    ptype: str
    v1: str = ""
    v2: str = ""
    v3: str = ""
    v4: str = ""
    v5: str = ""
    id: Optional[str] = None

    @classmethod
    def from_rule(cls, ptype: str, rule: Sequence[str]) -> "PolicyRecord":
        """Build a record from a Casbin rule, keeping its first five values."""
        if len(rule) > MAX_RULE_FIELDS:
            logger.warning(
                f"Rule {list(rule)} of type '{ptype}' has more than {MAX_RULE_FIELDS} values; "
                f"only the first {MAX_RULE_FIELDS} are stored"
            )
        return cls(ptype, *rule[:MAX_RULE_FIELDS])

    @classmethod
    def from_row(cls, row: dict) -> "PolicyRecord":
        """Build a record from a table row. Missing values read as empty strings."""
        values = {attribute.value: row.get(attribute.value) or "" for attribute in PolicyAttribute}
        return cls(id=row.get("id"), **values)

    @property
    def section(self) -> str:
        """
        The Casbin section of the rule: the first character of its ptype.

        ``p`` is a permission rule, ``g`` a grouping rule.

        Raises:
            ValueError: If the record has no ptype.
        """
        if not self.ptype:
            raise ValueError("a policy record without ptype has no section")
        return self.ptype[0]

    @property
    def values(self) -> tuple:
        return tuple(getattr(self, attribute.value) for attribute in RULE_ATTRIBUTES)

    def tokens(self) -> list[str]:
        """The non-empty values of the rule, in column order."""
        return [value for value in self.values if value]

    def to_row(self) -> dict:
        """The record as a table row; ``id`` is left out until the store assigns one."""
        row = {attribute.value: getattr(self, attribute.value) for attribute in PolicyAttribute}
        if self.id is not None:
            row["id"] = self.id
        return row


def load_policy_record(record: PolicyRecord, model: Model) -> bool:
    """
    Append ``record`` to the matching assertion of ``model``.

    Records without ptype are blank rows and are skipped. So are records whose
    ptype the model does not define.

    Returns:
        bool: True if the rule was added to the model.
    """
    if not record.ptype:
        return False

    sec = record.section
    if sec not in model.model or record.ptype not in model.model[sec]:
        logger.warning(f"Skipping rule {record.tokens()}: policy type '{record.ptype}' is not defined in the model")
        return False

    model.model[sec][record.ptype].policy.append(record.tokens())
    return True


class RethinkAdapter(BatchAdapter, UpdateAdapter, FilteredAdapter):
    """
    Casbin adapter storing policy rules in a RethinkDB table.

    The adapter borrows ``session``: closing the adapter detaches it but does
    not close the connection, which stays with its owner. Several adapters may
    share one connection.

    Save is a delete of the whole table followed by one batch insert. It is
    not atomic: if the insert fails, the table is left empty and the caller
    should save again from the in-memory model.

    Attributes:
        store (RethinkPolicyStore): The table the adapter reads and writes.
    """

    store_class = RethinkPolicyStore

    def __init__(self, session, database: str = DEFAULT_DATABASE, table: str = DEFAULT_TABLE):
        """
        Attach the adapter to ``database.table``, creating both if missing.

        Raises:
            PolicyStoreError: If the database or the table cannot be created.
        """
        self.store = self.store_class(session, database, table)
        self._filtered = False
        try:
            self.store.ensure_exists()
        except PolicyStoreError as e:
            logger.error(f"Failed to initialize the policy table {self.store.qualified_name}: {e}")
            raise

    @property
    def database(self) -> str:
        return self.store.database

    @database.setter
    def database(self, name: str) -> None:
        self.store.database = name

    @property
    def table(self) -> str:
        return self.store.table

    @table.setter
    def table(self, name: str) -> None:
        self.store.table = name

    def close(self) -> None:
        """Detach the adapter from its session. Further operations raise PolicyStoreError."""
        if self.store.session is not None:
            self.store.close()
            logger.info(f"Closed policy adapter for {self.store.qualified_name}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def is_filtered(self) -> bool:
        """
        Check whether the last load was a filtered one.

        Returns:
            bool: True if the model holds only the rules of the last filter.
        """
        return self._filtered

    def load_policy(self, model: Model) -> None:
        """
        Load every rule of the table into ``model``.

        Rules are appended in the order the server returns the rows. If the
        scan fails part way, the rules read so far stay in the model and the
        error is raised.

        Args:
            model (Model): The Casbin model to load policy rules into.

        Raises:
            PolicyStoreError: If the table cannot be read.
        """
        self.store.ensure_exists()
        self._filtered = False
        self._load_rows(model)

    def load_filtered_policy(self, model: Model, filter: Filter) -> None:  # pylint: disable=redefined-builtin
        """
        Load only the rules matching ``filter`` into ``model``.

        IMPORTANT: This method is used internally by the ``enforcer.load_filtered_policy()``
            method. Do not call this method directly.

        Args:
            model (Model): The Casbin model to load policy rules into.
            filter (Filter): Accepted values per column. Empty lists are ignored.
        """
        self.store.ensure_exists()
        filter_values = {attribute.value: getattr(filter, attribute.value) for attribute in PolicyAttribute}
        self._load_rows(model, filter_values)
        self._filtered = True

    def _load_rows(self, model: Model, filter_values: Optional[dict] = None) -> None:
        loaded = 0
        with self.store.rows(filter_values) as rows:
            for row in rows:
                if load_policy_record(PolicyRecord.from_row(row), model):
                    loaded += 1
        logger.debug(f"Loaded {loaded} rules from {self.store.qualified_name}")

    def save_policy(self, model: Model) -> bool:
        """
        Replace the content of the table with the rules of ``model``.

        Args:
            model (Model): The Casbin model whose rules are persisted.

        Returns:
            bool: True once the rules are written.

        Raises:
            PolicyStoreError: If the delete or the insert fails.
        """
        self.store.ensure_exists()
        rows = [
            PolicyRecord.from_rule(ptype, rule).to_row()
            for assertions in model.model.values()
            for ptype, assertion in assertions.items()
            for rule in assertion.policy
        ]
        self.store.delete_rows()
        self.store.insert_rows(rows)
        logger.info(f"Saved {len(rows)} rules to {self.store.qualified_name}")
        return True

    def add_policy(self, sec: str, ptype: str, rule: Sequence[str]) -> bool:
        """Insert one rule. Duplicates are not checked."""
        self.store.insert_rows([PolicyRecord.from_rule(ptype, rule).to_row()])
        return True

    def add_policies(self, sec: str, ptype: str, rules: Sequence[Sequence[str]]) -> bool:
        """Insert several rules in one batch."""
        self.store.insert_rows([PolicyRecord.from_rule(ptype, rule).to_row() for rule in rules])
        return True

    def remove_policy(self, sec: str, ptype: str, rule: Sequence[str]) -> bool:
        """
        Delete every row equal to ``rule``.

        All five values take part in the match, so a short rule only matches
        rows whose remaining values are empty.
        """
        self.store.delete_rows(PolicyRecord.from_rule(ptype, rule).to_row())
        return True

    def remove_policies(self, sec: str, ptype: str, rules: Sequence[Sequence[str]]) -> bool:
        for rule in rules:
            self.remove_policy(sec, ptype, rule)
        return True

    def remove_filtered_policy(self, sec: str, ptype: str, field_index: int, *field_values: str) -> bool:
        """
        Delete the rows of ``ptype`` matching ``field_values``.

        ``field_values`` constrain consecutive values starting at position
        ``field_index`` (0 is ``v1``). Positions outside that window, and
        positions given an empty string, match anything.

        Raises:
            PolicyStoreError: If the delete fails.
        """
        selector = {PolicyAttribute.PTYPE.value: ptype}
        for i, attribute in enumerate(RULE_ATTRIBUTES):
            if field_index <= i < field_index + len(field_values):
                value = field_values[i - field_index]
                if value:
                    selector[attribute.value] = value
        self.store.delete_rows(selector)
        return True

    def update_policy(self, sec: str, ptype: str, old_rule: Sequence[str], new_policy: Sequence[str]) -> bool:
        """Replace ``old_rule`` with ``new_policy``."""
        self.remove_policy(sec, ptype, old_rule)
        self.add_policy(sec, ptype, new_policy)
        return True

    def update_policies(
        self,
        sec: str,
        ptype: str,
        old_rules: Sequence[Sequence[str]],
        new_rules: Sequence[Sequence[str]],
    ) -> bool:
        self.remove_policies(sec, ptype, old_rules)
        self.add_policies(sec, ptype, new_rules)
        return True
