from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

# Same label separators as the IDNA to-ASCII operation
_SEPARATORS_RE = re.compile("[.。．｡]")


def to_ascii(domain: str) -> str:
    """Punycode-encode every non-ASCII label, leave ASCII labels untouched."""
    labels = _SEPARATORS_RE.split(domain)
    converted: List[str] = []
    for label in labels:
        if label.isascii():
            converted.append(label)
        else:
            converted.append("xn--" + label.encode("punycode").decode("ascii"))
    return ".".join(converted)


@dataclass(frozen=True)
class RuleRecord:
    """One Public Suffix List entry."""
    raw_rule: str
    suffix: str
    is_wildcard: bool
    is_exception: bool
    ascii_suffix: str

    @classmethod
    def from_raw(cls, raw_rule: str) -> "RuleRecord":
        is_wildcard = raw_rule.startswith("*.")
        is_exception = raw_rule.startswith("!")
        if is_wildcard:
            suffix = raw_rule[2:]
        elif is_exception:
            suffix = raw_rule[1:]
        else:
            suffix = raw_rule
        return cls(
            raw_rule=raw_rule,
            suffix=suffix,
            is_wildcard=is_wildcard,
            is_exception=is_exception,
            ascii_suffix=to_ascii(suffix.lower()),
        )


RuleSet = Tuple[RuleRecord, ...]


def ingest(raw_rules: Iterable[str]) -> RuleSet:
    """Turn raw rule strings into a RuleSet, one record per string, in order.

    Order is load-bearing: the matcher keeps the *last* rule that matches, so
    a child rule (``city.kawasaki.jp``) must come after its parent
    (``kawasaki.jp``). The list is never sorted or deduplicated here.
    """
    return tuple(RuleRecord.from_raw(r) for r in raw_rules)


def find_order_violations(rules: RuleSet) -> List[Tuple[int, int]]:
    """
    Return (child_index, parent_index) pairs where a rule is listed before a
    rule for one of its parent suffixes. Such a parent would win the scan
    over the more specific child.
    """
    last_index: Dict[str, int] = {}
    for i, rule in enumerate(rules):
        last_index[rule.ascii_suffix] = i

    violations: List[Tuple[int, int]] = []
    for i, rule in enumerate(rules):
        labels = rule.ascii_suffix.split(".")
        for n in range(1, len(labels)):
            parent = ".".join(labels[n:])
            j = last_index.get(parent)
            if j is not None and j > i:
                violations.append((i, j))
    return violations
