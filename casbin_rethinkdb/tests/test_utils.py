"""Test utilities for building Casbin models and policy table rows."""

import os

from casbin.model import Model

from casbin_rethinkdb import ROOT_DIRECTORY
from casbin_rethinkdb.engine.adapter import PolicyRecord

MODEL_PATH = os.path.join(ROOT_DIRECTORY, "engine", "config", "model.conf")
EXAMPLE_POLICY_PATH = os.path.join(ROOT_DIRECTORY, "engine", "config", "example.policy")


def new_model() -> Model:
    """Create an empty Casbin model from the bundled model definition.

    Returns:
        Model: Model with the ``p``, ``g`` and ``g2`` policy types and no rules.
    """
    model = Model()
    model.load_model(MODEL_PATH)
    return model


def make_row(ptype: str, *values: str) -> dict:
    """Create a table row as the store would hold it.

    Args:
        ptype: The policy type (e.g., 'p', 'g2')
        *values: The rule values, stored from ``v1`` onwards

    Returns:
        dict: Row with all five value columns (e.g., {'ptype': 'g', 'v1': 'alice', 'v2': 'admin', 'v3': '', ...})
    """
    row = {"ptype": ptype, "v1": "", "v2": "", "v3": "", "v4": "", "v5": ""}
    for i, value in enumerate(values):
        row[f"v{i + 1}"] = value
    return row


def stored_rules(store, ptype: str) -> list:
    """Return the non-empty values of every stored row of ``ptype``, in table order."""
    return [PolicyRecord.from_row(row).tokens() for row in store.data if row["ptype"] == ptype]
