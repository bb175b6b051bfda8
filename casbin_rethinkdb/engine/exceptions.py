"""
Exceptions raised by the RethinkDB policy storage.
"""


class PolicyStoreError(Exception):
    """
    A policy storage operation failed.

    Wraps the driver error (available as ``__cause__``) and records which
    operation failed against which table.

    Attributes:
        operation (str): Name of the failed operation, e.g. ``"insert"``.
        table (str): Fully qualified ``database.table`` the operation targeted.
    """

    def __init__(self, operation: str, table: str, reason):
        self.operation = operation
        self.table = table
        self.reason = reason
        super().__init__(f"{operation} failed on {table}: {reason}")
