"""
Semantic linking of a parsed ruleset.

Cross-references the column names used by rule blocks and conditional rules
against the declared column list. Problems found here are warnings only and
never stop evaluation.
"""

from collections import Counter

from ruleval.core.models import Finding, Ruleset
from ruleval.observability.logger import get_logger

logger = get_logger(__name__)

NO_VALUE_RULES = "no value rules present"


def _warning(message: str, column: str | None = None, rule: str | None = None) -> Finding:
    return Finding(severity="warning", category="link", message=message, column=column, rule=rule)


def link_ruleset(ruleset: Ruleset) -> list[Finding]:
    """
    Check column references of a ruleset.

    Args:
        ruleset: Parsed ruleset

    Returns:
        Warning findings, in declaration order
    """
    findings: list[Finding] = []
    declared = set(ruleset.columns.names)

    for name, count in Counter(ruleset.columns.names).items():
        if count > 1:
            findings.append(_warning(f"column '{name}' is declared {count} times", column=name))

    for name in dict.fromkeys(ruleset.columns.names):
        if name not in ruleset.blocks or not ruleset.blocks[name].rules:
            findings.append(_warning(f"column '{name}' has no associated value rules", column=name))

    for column in ruleset.blocks:
        if column not in declared:
            findings.append(_warning(f"rules for undeclared column '{column}'", column=column))

    for conditional in ruleset.conditionals:
        for clause in (conditional.antecedent, conditional.consequent):
            if clause.column not in declared:
                findings.append(
                    _warning(
                        f"rules for undeclared column '{clause.column}' "
                        f"in conditional rule '{conditional.name}'",
                        column=clause.column,
                        rule=conditional.name,
                    )
                )

    if ruleset.value_rule_count == 0:
        findings.append(_warning(NO_VALUE_RULES))

    if findings:
        logger.debug(f"Linker produced {len(findings)} warnings")
    return findings
