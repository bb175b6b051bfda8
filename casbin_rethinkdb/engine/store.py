"""
RethinkDB access for the policy table.

Every ReQL query the adapter needs lives here, so that the adapter itself only
deals with Casbin models and policy records. Each method is a single round
trip to the server. Driver errors are re-raised as ``PolicyStoreError`` with
the failing operation and table attached.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Mapping, Optional, Sequence

from rethinkdb import r
from rethinkdb.errors import ReqlError

from casbin_rethinkdb.engine.exceptions import PolicyStoreError

logger = logging.getLogger(__name__)


class RethinkPolicyStore:
    """
    Policy rows stored in one RethinkDB ``database.table``.

    The store borrows the connection it is given and never closes it; the
    owner of the connection is responsible for that.

    Attributes:
        session: Open ``rethinkdb`` connection, ``None`` once the store is closed.
        database (str): Target database name.
        table (str): Target table name.
    """

    def __init__(self, session, database: str, table: str):
        self.session = session
        self.database = database
        self.table = table

    @property
    def qualified_name(self) -> str:
        return f"{self.database}.{self.table}"

    def query(self):
        """Return the ReQL term selecting the whole policy table."""
        return r.db(self.database).table(self.table)

    def ensure_database(self) -> None:
        """Create the database unless it already exists."""
        database = self.database
        result = self._run(
            "ensure_database",
            r.db_list().contains(database).do(lambda exists: r.branch(exists, None, r.db_create(database))),
        )
        if result and result.get("dbs_created"):
            logger.info(f"Created RethinkDB database '{database}'")

    def ensure_table(self) -> None:
        """Create the table unless it already exists."""
        db = r.db(self.database)
        table = self.table
        result = self._run(
            "ensure_table",
            db.table_list().contains(table).do(lambda exists: r.branch(exists, None, db.table_create(table))),
        )
        if result and result.get("tables_created"):
            logger.info(f"Created RethinkDB table '{self.qualified_name}'")

    def ensure_exists(self) -> None:
        self.ensure_database()
        self.ensure_table()

    @contextmanager
    def rows(self, filter_values: Optional[Mapping[str, Sequence[str]]] = None) -> Iterator[Iterator[dict]]:
        """
        Stream the rows of the table.

        The cursor is closed when the ``with`` block exits, whether it exits
        normally or through an exception.

        Args:
            filter_values: Optional mapping of field name to accepted values.
                Fields with an empty list are not constrained. Constraints on
                different fields are combined with AND.

        Yields:
            Iterator[dict]: The rows, in the order the server returns them.
        """
        query = self.query()
        for field, values in (filter_values or {}).items():
            if values:
                query = query.filter(r.expr(list(values)).contains(r.row[field]))

        cursor = self._run("scan", query)
        try:
            yield self._iterate(cursor)
        finally:
            cursor.close()

    def insert_rows(self, rows: Sequence[dict]) -> int:
        """
        Insert ``rows`` in one batch.

        Returns:
            int: Number of inserted rows.

        Raises:
            PolicyStoreError: If the query fails or the server rejects any row.
        """
        if not rows:
            return 0
        result = self._run("insert", self.query().insert(list(rows)))
        self._check_result("insert", result)
        inserted = result.get("inserted", 0)
        logger.debug(f"Inserted {inserted} rows into {self.qualified_name}")
        return inserted

    def delete_rows(self, selector: Optional[Mapping[str, str]] = None) -> int:
        """
        Delete rows matching ``selector``, or every row when no selector is given.

        Args:
            selector: Mapping of field name to the exact value the row must have.

        Returns:
            int: Number of deleted rows.
        """
        query = self.query()
        if selector:
            query = query.filter(dict(selector))
        result = self._run("delete", query.delete())
        self._check_result("delete", result)
        deleted = result.get("deleted", 0)
        logger.debug(f"Deleted {deleted} rows from {self.qualified_name}")
        return deleted

    def close(self) -> None:
        self.session = None

    def _run(self, operation: str, query):
        if self.session is None:
            raise PolicyStoreError(operation, self.qualified_name, "store is closed")
        try:
            return query.run(self.session)
        except ReqlError as err:
            raise PolicyStoreError(operation, self.qualified_name, err) from err

    def _iterate(self, cursor) -> Iterator[dict]:
        try:
            yield from cursor
        except ReqlError as err:
            raise PolicyStoreError("scan", self.qualified_name, err) from err

    def _check_result(self, operation: str, result: dict) -> None:
        if result.get("errors"):
            raise PolicyStoreError(operation, self.qualified_name, result.get("first_error", "unknown error"))
