"""
Rules language, ruleset construction and the rule engine.
"""

from .aggregator import ResultAggregator
from .builder import RulesetBuilder
from .linker import link_ruleset
from .parser import RulesetParser, parse_ruleset
from .rule_config import RulesFileLoader
from .rule_engine import RuleEngine

__all__ = [
    "RuleEngine",
    "ResultAggregator",
    "RulesFileLoader",
    "RulesetBuilder",
    "RulesetParser",
    "parse_ruleset",
    "link_ruleset",
]
