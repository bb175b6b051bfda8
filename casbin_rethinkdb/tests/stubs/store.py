"""In-memory stand-ins for the RethinkDB policy table, used by the tests."""

import uuid
from contextlib import contextmanager

from casbin_rethinkdb.engine.adapter import RethinkAdapter
from casbin_rethinkdb.engine.exceptions import PolicyStoreError
from casbin_rethinkdb.engine.store import RethinkPolicyStore


class InMemoryPolicyStore(RethinkPolicyStore):
    """RethinkPolicyStore keeping its rows in a list.

    Rows are returned in insertion order. ``failures`` maps an operation name
    (``ensure_exists``, ``scan``, ``insert``, ``delete``) to the error message
    the next calls of that operation fail with. ``fail_scan_after`` makes a
    scan fail after yielding that many rows.
    """

    def __init__(self, session, database, table):
        super().__init__(session, database, table)
        self.data = []
        self.ensure_calls = 0
        self.failures = {}
        self.fail_scan_after = None
        self.open_cursors = 0

    def ensure_exists(self):
        self._guard("ensure_exists")
        self.ensure_calls += 1

    @contextmanager
    def rows(self, filter_values=None):
        self._guard("scan")
        selected = [
            dict(row)
            for row in self.data
            if all(not values or row.get(field) in values for field, values in (filter_values or {}).items())
        ]
        self.open_cursors += 1
        try:
            yield self._stream(selected)
        finally:
            self.open_cursors -= 1

    def insert_rows(self, rows):
        self._guard("insert")
        for row in rows:
            self.data.append({"id": str(uuid.uuid4()), **row})
        return len(rows)

    def delete_rows(self, selector=None):
        self._guard("delete")
        kept = [row for row in self.data if selector and not _matches(row, selector)]
        deleted = len(self.data) - len(kept)
        self.data = kept
        return deleted

    def _guard(self, operation):
        if self.session is None:
            raise PolicyStoreError(operation, self.qualified_name, "store is closed")
        if operation in self.failures:
            raise PolicyStoreError(operation, self.qualified_name, self.failures[operation])

    def _stream(self, rows):
        for count, row in enumerate(rows):
            if self.fail_scan_after is not None and count >= self.fail_scan_after:
                raise PolicyStoreError("scan", self.qualified_name, "connection lost")
            yield row


def _matches(row, selector):
    return all(row.get(field) == value for field, value in selector.items())


class InMemoryAdapter(RethinkAdapter):
    """RethinkAdapter whose table lives in memory."""

    store_class = InMemoryPolicyStore
