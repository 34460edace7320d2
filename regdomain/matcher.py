from __future__ import annotations
from typing import Optional
from .rules import RuleRecord, RuleSet, to_ascii


def find_rule(domain: str, rules: RuleSet) -> Optional[RuleRecord]:
    """
    Return the rule that applies to ``domain``.

    Every rule whose suffix equals the domain, or is a dot-delimited suffix of
    it, replaces the previous match; lengths are not compared. The PSL lists
    child rules after their parents, so the last match is the most specific
    one. Feeding a reordered rule set changes the result.
    """
    ascii_domain = to_ascii(domain)
    match = None
    for rule in rules:
        if ascii_domain == rule.ascii_suffix or ascii_domain.endswith("." + rule.ascii_suffix):
            match = rule
    return match
