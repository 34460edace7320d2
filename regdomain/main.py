from __future__ import annotations
import argparse
import json
import logging
import sys
from .config import Config
from .logging_setup import setup_logging
from .parser import parse
from .store import RuleStore, set_default_store
from .updater import UpdateOptions, update, last_updated

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="regdomain",
                                 description="Split domain names using the Public Suffix List")
    ap.add_argument("--config", help="Path to config.yaml")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("parse", help="Print the parse result of each domain as JSON",
                       epilog="Put -- before the domains when one starts with a dash: parse -- -x.com")
    p.add_argument("domains", nargs="+", help="Domains to parse (use -- before names starting with \"-\")")

    g = sub.add_parser("get", help="Print the registrable domain")
    g.add_argument("domain")

    u = sub.add_parser("update", help="Download the suffix list and save it")
    u.add_argument("--url", help="List source (default: publicsuffix.org)")
    u.add_argument("--icann-only", action="store_true", help="Skip privately contributed suffixes")

    sub.add_parser("last-updated", help="Days since the list was saved")
    return ap


def _update_options(cfg: Config, args) -> UpdateOptions:
    update_cfg = cfg.section("update")
    also_private = bool(update_cfg.get("also_private_domains", True))
    if args.icann_only:
        also_private = False
    return UpdateOptions.from_mapping({
        "url": args.url or update_cfg.get("url"),
        "also_private_domains": also_private,
        "timeout": update_cfg.get("timeout_seconds"),
    })


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    cfg = Config.load(args.config)
    setup_logging(cfg.data)
    log.debug("Config: %s", args.config)

    store = RuleStore(cfg.get("rules_file")).load()
    set_default_store(store)

    if args.command == "update":
        errors = []
        t = update(_update_options(cfg, args), errors.append, store=store)
        t.join()
        if errors[0] is not None:
            print(f"Update failed: {errors[0]}", file=sys.stderr)
            return 1
        print(f"Saved {len(store.rules)} rules to {store.path}")
        return 0

    if args.command == "last-updated":
        result = {}
        last_updated(lambda err, days: result.update(err=err, days=days), store=store)
        if result["err"] is not None:
            print(f"No suffix list at {store.path}", file=sys.stderr)
            return 1
        print(result["days"])
        return 0

    if args.command == "parse":
        for domain in args.domains:
            print(json.dumps(parse(domain, store.rules).to_dict(), ensure_ascii=False))
    elif args.command == "get":
        print(parse(args.domain, store.rules).domain or "")
    return 0


if __name__ == "__main__":
    sys.exit(main())
