"""
Filter for selective loading of policy rules from RethinkDB.

A Filter names, per column of the policy table, the values a row may have in
order to be loaded. It is passed to ``enforcer.load_filtered_policy()``, which
hands it to ``RethinkAdapter.load_filtered_policy()``.
"""

from typing import Optional

import attr


@attr.define
class Filter:
    """
    Filter class for selective Casbin policy loading.

    Each attribute corresponds to a column of the policy table and accepts a
    list of values to filter by.

    Note:
        - An empty list (or None) means no filtering on that column
        - A non-empty list only accepts rows whose column is one of its values
        - All non-empty constraints are combined with AND logic
    """

    ptype: Optional[list[str]] = attr.field(factory=list)
    """ptype (Optional[list[str]]): Policy type filter.

    - ``p``  → Permission rule.
    - ``g``  → Grouping rule (subject ↔ role).
    - ``g2`` → Resource grouping (resource ↔ parent resource).
    """

    v1: Optional[list[str]] = attr.field(factory=list)
    """v1 (Optional[list[str]]): First rule value filter.

    - For ``p`` → Subject (e.g., ``role^admin``).
    - For ``g`` → Member (e.g., ``user^alice``).
    """

    v2: Optional[list[str]] = attr.field(factory=list)
    """v2 (Optional[list[str]]): Second rule value filter.

    - For ``p`` → Object (e.g., ``data^reports``).
    - For ``g`` → Role (e.g., ``role^admin``).
    """

    v3: Optional[list[str]] = attr.field(factory=list)
    """v3 (Optional[list[str]]): Third rule value filter.

    - For ``p`` → Action (e.g., ``read``).
    - For ``g`` → Domain, when the model uses one.
    """

    v4: Optional[list[str]] = attr.field(factory=list)
    """v4 (Optional[list[str]]): Fourth rule value filter."""

    v5: Optional[list[str]] = attr.field(factory=list)
    """v5 (Optional[list[str]]): Fifth rule value filter."""
