from __future__ import annotations
import codecs
import json
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator, List, Mapping, Optional, Union
import requests
from .rules import ingest
from .store import RuleStore, default_store

log = logging.getLogger(__name__)

DEFAULT_URL = "https://publicsuffix.org/list/effective_tld_names.dat"
BEGIN_ICANN = "===BEGIN ICANN DOMAINS==="
END_ICANN = "===END ICANN DOMAINS==="


@dataclass
class UpdateOptions:
    also_private_domains: bool = True
    url: str = DEFAULT_URL
    timeout: int = 60

    @classmethod
    def from_mapping(cls, options: Optional[Mapping[str, Any]]) -> "UpdateOptions":
        """Build options from a mapping, ignoring keys that are unset (None)."""
        opts = cls()
        for key, value in (options or {}).items():
            if not hasattr(opts, key):
                raise ValueError(f"Unknown update option: {key}")
            if value is not None:
                setattr(opts, key, value)
        return opts


# --- pipeline stages ---

def fetch_chunks(url: str, timeout: int = 60) -> Iterator[bytes]:
    """Stream the raw list body."""
    log.info("Fetching suffix list: %s timeout=%ss", url, timeout)
    with requests.get(url, timeout=timeout, stream=True) as resp:
        log.debug("Suffix list response: status=%s content-type=%s",
                  resp.status_code, resp.headers.get("Content-Type"))
        resp.raise_for_status()
        for chunk in resp.iter_content(chunk_size=65536):
            if chunk:
                yield chunk


def split_lines(chunks: Iterable[bytes]) -> Iterator[str]:
    """Decode UTF-8 chunks and yield complete lines (line breaks stripped)."""
    decoder = codecs.getincrementaldecoder("utf-8")()
    pending = ""
    for chunk in chunks:
        pending += decoder.decode(chunk)
        lines = pending.split("\n")
        pending = lines.pop()
        for line in lines:
            yield line.rstrip("\r")
    pending += decoder.decode(b"", final=True)
    if pending:
        yield pending.rstrip("\r")


class RuleLineFilter:
    """
    Maps one list line to a rule string, or None when the line carries no
    rule to keep. Tracks whether the current line is inside the ICANN section,
    which only matters when private domains are excluded.
    """
    def __init__(self, also_private_domains: bool = True):
        self.also_private_domains = also_private_domains
        self.in_icann = False

    def __call__(self, line: str) -> Optional[str]:
        trimmed = line.strip()
        if not trimmed:
            return None
        if trimmed.startswith("//"):
            if not self.also_private_domains and (BEGIN_ICANN in trimmed or END_ICANN in trimmed):
                self.in_icann = not self.in_icann
            return None

        # Only read up to the first whitespace
        rule = trimmed.split()[0]
        if self.also_private_domains or self.in_icann:
            return rule
        return None


def filter_rules(lines: Iterable[str], also_private_domains: bool = True) -> Iterator[str]:
    line_filter = RuleLineFilter(also_private_domains)
    for line in lines:
        rule = line_filter(line)
        if rule is not None:
            yield rule


def serialize_json_array(rules: Iterable[str]) -> Iterator[str]:
    """Yield a JSON array of strings piece by piece."""
    yield "["
    first = True
    for rule in rules:
        if not first:
            yield ","
        first = False
        yield json.dumps(rule, ensure_ascii=False)
    yield "]"


def _collect(items: Iterable[str], into: List[str]) -> Iterator[str]:
    for item in items:
        into.append(item)
        yield item


class RuleListUpdater:
    """fetch -> split lines -> filter -> serialize -> write -> ingest -> publish."""
    def __init__(self, store: RuleStore):
        self.store = store

    def run(self, options: Optional[UpdateOptions] = None) -> int:
        """Run one update and return the number of rules published.

        Errors from any stage propagate; nothing is published unless the new
        list was written completely.
        """
        opts = options or UpdateOptions()
        with self.store.update_lock:
            log.info("Rule list update started: url=%s also_private_domains=%s",
                     opts.url, opts.also_private_domains)
            collected: List[str] = []
            chunks = fetch_chunks(opts.url, opts.timeout)
            lines = split_lines(chunks)
            rules = _collect(filter_rules(lines, opts.also_private_domains), collected)
            self.store.write_raw(serialize_json_array(rules))
            self.store.publish(ingest(collected))
            log.info("Rule list update finished: %d rules", len(collected))
            return len(collected)


def update(options: Union[UpdateOptions, Mapping[str, Any], None] = None,
           callback: Optional[Callable[[Optional[BaseException]], None]] = None,
           store: Optional[RuleStore] = None) -> threading.Thread:
    """
    Refresh the rule list in a background thread.

    ``callback`` receives None on success or the exception that stopped the
    pipeline. The thread is returned so callers can join it. Pass the
    callback by keyword when there are no options.
    """
    if callable(options):
        raise TypeError("update() options must be a mapping or UpdateOptions; pass the callback as callback=")
    if not isinstance(options, UpdateOptions):
        options = UpdateOptions.from_mapping(options)
    updater = RuleListUpdater(store or default_store())

    def _worker():
        try:
            updater.run(options)
        except Exception as e:
            log.exception("Rule list update from %s failed", options.url)
            if callback:
                callback(e)
            return
        if callback:
            callback(None)

    t = threading.Thread(target=_worker, name="rule-list-update", daemon=True)
    t.start()
    return t


def last_updated(callback: Callable[[Optional[BaseException], Optional[int]], None],
                 store: Optional[RuleStore] = None) -> None:
    """Call back with the number of days since the rule list was last saved."""
    store = store or default_store()
    try:
        days = store.days_since_update()
    except OSError as e:
        callback(e, None)
        return
    callback(None, days)
