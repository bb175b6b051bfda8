"""Policy migration module.

This module copies policy rules between Casbin enforcers, typically from a
file-based enforcer into the RethinkDB-backed one.
"""

import logging

from casbin import Enforcer

logger = logging.getLogger(__name__)

PERMISSION_SECTION = "p"
GROUPING_SECTION = "g"


def migrate_policy_between_enforcers(source_enforcer: Enforcer, target_enforcer: Enforcer) -> int:
    """Copy the rules of the source enforcer that the target enforcer lacks.

    Rules are added per policy type in one batch, so with auto-save enabled
    each policy type costs a single insert on the target storage. Policy
    types the target model does not define are skipped.

    Args:
        source_enforcer (Enforcer): The Casbin enforcer to migrate rules from (e.g., file-based).
        target_enforcer (Enforcer): The Casbin enforcer to migrate rules to (e.g., RethinkDB-backed).

    Returns:
        int: Number of rules added to the target.
    """
    try:
        source_enforcer.load_policy()
        target_enforcer.load_policy()
        logger.info(f"Target enforcer has {len(target_enforcer.get_policy())} existing policies before migration.")

        source_model = source_enforcer.get_model().model
        target_model = target_enforcer.get_model().model
        migrated = 0

        for sec in (PERMISSION_SECTION, GROUPING_SECTION):
            for ptype, assertion in source_model.get(sec, {}).items():
                if ptype not in target_model.get(sec, {}):
                    logger.info(f"Skipping {ptype} rules: not defined in the target model.")
                    continue

                new_rules = []
                for rule in assertion.policy:
                    if rule in new_rules or _has_rule(target_enforcer, sec, ptype, rule):
                        logger.info(f"Rule {ptype}, {rule} already exists in target, skipping.")
                        continue
                    new_rules.append(rule)

                if not new_rules:
                    continue
                if sec == PERMISSION_SECTION:
                    target_enforcer.add_named_policies(ptype, new_rules)
                else:
                    target_enforcer.add_named_grouping_policies(ptype, new_rules)
                migrated += len(new_rules)
                logger.info(f"Migrated {len(new_rules)} {ptype} rules.")

        logger.info(f"Successfully migrated {migrated} rules into the target enforcer.")
        return migrated
    except Exception as e:
        logger.error(f"Error migrating policies between enforcers: {e}")
        raise


def _has_rule(enforcer: Enforcer, sec: str, ptype: str, rule: list) -> bool:
    if sec == PERMISSION_SECTION:
        return enforcer.has_named_policy(ptype, *rule)
    return enforcer.has_named_grouping_policy(ptype, *rule)
