# File: sqlcwizard/rules.py
"""
SQLC Wizard - Safety Rule Catalog
==================================
Closed vocabulary of sqlc vet rules, one per safety toggle.  The wizard
only *emits* these predicates; sqlc evaluates them.

Catalog order is the toggle definition order of ``SafetyToggles`` and is
the order in which rules appear in the generated document, regardless of
the order in which toggles were enabled.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Tuple

from sqlcwizard.errors import invalid_enum
from sqlcwizard.models import RuleConfig, SafetyToggles

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("sqlcwizard.rules")


@dataclass(frozen=True)
class SafetyRule:
    toggle: str
    name: str
    rule: str
    message: str

    def to_config(self) -> RuleConfig:
        return RuleConfig(name=self.name, rule=self.rule, message=self.message)


RULE_CATALOG: Tuple[SafetyRule, ...] = (
    SafetyRule(
        toggle="no_select_star",
        name="no-select-star",
        rule='!query.sql.contains("SELECT *")',
        message="SELECT * is not allowed for security and performance reasons",
    ),
    SafetyRule(
        toggle="require_where",
        name="require-where-delete",
        rule=(
            'query.cmd != "exec" || !query.sql.contains("DELETE") '
            '|| query.sql.contains("WHERE")'
        ),
        message="DELETE statements must include a WHERE clause",
    ),
    SafetyRule(
        toggle="no_drop_table",
        name="no-drop-table",
        rule='!query.sql.contains("DROP TABLE")',
        message="DROP TABLE statements are not allowed",
    ),
    SafetyRule(
        toggle="no_truncate",
        name="no-truncate",
        rule='!query.sql.contains("TRUNCATE")',
        message="TRUNCATE statements are not allowed",
    ),
    SafetyRule(
        toggle="require_limit",
        name="require-limit-select",
        rule='query.cmd == "many" implies query.sql.contains("LIMIT")',
        message="SELECT queries that return multiple rows should include a LIMIT clause",
    ),
)

TOGGLE_NAMES: Tuple[str, ...] = tuple(r.toggle for r in RULE_CATALOG)
RULE_NAMES: Tuple[str, ...] = tuple(r.name for r in RULE_CATALOG)


def rules_for_toggles(names: Iterable[str]) -> List[RuleConfig]:
    """
    Rules for the given toggle names, in catalog order.

    Duplicates are ignored; an unknown toggle name raises ``InvalidEnum``.
    """
    requested: set = set()
    for name in names:
        if name not in TOGGLE_NAMES:
            raise invalid_enum("safety", name, TOGGLE_NAMES)
        requested.add(name)
    return [r.to_config() for r in RULE_CATALOG if r.toggle in requested]


def rules_for(safety: SafetyToggles) -> List[RuleConfig]:
    """Rules for every toggle enabled on *safety*."""
    rules: List[RuleConfig] = rules_for_toggles(safety.enabled())
    logger.debug("Safety rules: %s", [r.name for r in rules] or "none")
    return rules


__all__: List[str] = [
    "SafetyRule",
    "RULE_CATALOG",
    "TOGGLE_NAMES",
    "RULE_NAMES",
    "rules_for_toggles",
    "rules_for",
]
