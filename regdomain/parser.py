from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional, Tuple
from .matcher import find_rule
from .rules import RuleRecord, RuleSet, to_ascii
from .store import default_store
from .validator import ErrorCode, validate


@dataclass(frozen=True)
class ParseError:
    code: str
    message: str


@dataclass(frozen=True)
class ParsedDomain:
    """Result of parse(). Built once per call, never mutated."""
    input: str
    tld: Optional[str] = None
    sld: Optional[str] = None
    domain: Optional[str] = None
    subdomain: Optional[str] = None
    listed: bool = False
    error: Optional[ParseError] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _error_result(input: str, code: ErrorCode) -> ParsedDomain:
    return ParsedDomain(input=input, error=ParseError(code=code.value, message=code.message))


def _split_listed(labels: List[str], rule: RuleRecord) -> Optional[Tuple[str, str, Optional[str]]]:
    """Return (tld, sld, subdomain) for a listed suffix, or None when the
    domain is itself a public suffix."""
    tld_parts = rule.suffix.split(".")
    private_parts = labels[:len(labels) - len(tld_parts)]

    if rule.is_exception:
        # !name.suffix makes name.suffix registrable
        private_parts.append(tld_parts.pop(0))
    if not private_parts:
        return None

    if rule.is_wildcard:
        tld_parts.insert(0, private_parts.pop())
    if not private_parts:
        return None

    sld = private_parts.pop()
    subdomain = ".".join(private_parts) if private_parts else None
    return ".".join(tld_parts), sld, subdomain


def parse(input: str, rules: Optional[RuleSet] = None) -> ParsedDomain:
    """
    Split ``input`` into tld (public suffix), sld, registrable domain and
    subdomain.

    Malformed names come back with ``error`` set; only a non-string input
    raises. ``rules`` defaults to the rule set currently published by the
    default store.
    """
    if not isinstance(input, str):
        raise TypeError("Domain name must be a string.")

    domain = input.lower()
    if domain.endswith("."):
        domain = domain[:-1]

    error = validate(to_ascii(domain))
    if error:
        return _error_result(input, error)

    labels = domain.split(".")

    # Non-Internet TLD
    if labels[-1] == "local":
        return ParsedDomain(input=input)

    if rules is None:
        rules = default_store().rules
    rule = find_rule(domain, rules)

    listed = rule is not None
    tld = sld = registrable = subdomain = None
    if not listed:
        if len(labels) >= 2:
            tld = labels.pop()
            sld = labels.pop()
            registrable = sld + "." + tld
            if labels:
                subdomain = labels.pop()
    else:
        parts = _split_listed(labels, rule)
        if parts is not None:
            tld, sld, subdomain = parts
            registrable = sld + "." + tld

    if "xn--" in domain:
        if registrable:
            registrable = to_ascii(registrable)
        if subdomain:
            subdomain = to_ascii(subdomain)

    return ParsedDomain(
        input=input,
        tld=tld,
        sld=sld,
        domain=registrable,
        subdomain=subdomain,
        listed=listed,
    )


def get(domain: str, rules: Optional[RuleSet] = None) -> Optional[str]:
    """Registrable domain of ``domain`` or None."""
    if not domain:
        return None
    return parse(domain, rules).domain or None


def is_valid(domain: str, rules: Optional[RuleSet] = None) -> bool:
    """True when ``domain`` has a registrable domain under a listed suffix."""
    parsed = parse(domain, rules)
    return bool(parsed.domain and parsed.listed)
