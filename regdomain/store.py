from __future__ import annotations
import json
import os
import stat
import tempfile
import threading
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Union
from .rules import RuleSet, find_order_violations, ingest

log = logging.getLogger(__name__)

DEFAULT_RULES_FILE = Path(__file__).parent / "data" / "rules.json"


class RuleStore:
    """
    Persisted rule list plus the RuleSet published to readers.

    The published set is an immutable tuple replaced by reference, so a reader
    holding ``store.rules`` keeps a consistent snapshot while an update swaps
    in a new one.
    """
    def __init__(self, path: Union[str, Path, None] = None):
        self.path = Path(path) if path else DEFAULT_RULES_FILE
        self._rules: RuleSet = ()
        self._lock = threading.Lock()
        # Held by the updater for a whole fetch-write-publish run
        self.update_lock = threading.Lock()

    @property
    def rules(self) -> RuleSet:
        return self._rules

    def publish(self, rules: RuleSet) -> None:
        """Swap in a fully built rule set."""
        rules = tuple(rules)
        violations = find_order_violations(rules)
        if violations:
            child, parent = violations[0]
            log.warning("Rule list has %d parent/child ordering violations, first: %r listed before %r",
                        len(violations), rules[child].raw_rule, rules[parent].raw_rule)
        with self._lock:
            self._rules = rules
        log.info("Published %d rules", len(rules))

    def read_raw(self) -> List[str]:
        """Read persisted rule strings. Missing or corrupt data reads as empty."""
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            log.warning("Rules file not found: %s", self.path)
            return []
        except (OSError, ValueError) as e:
            log.warning("Could not read rules file %s: %s", self.path, e)
            return []
        if not isinstance(data, list) or not all(isinstance(r, str) for r in data):
            log.warning("Rules file %s does not hold a list of strings", self.path)
            return []
        return data

    def load(self) -> "RuleStore":
        """Ingest the persisted list and publish it."""
        self.publish(ingest(self.read_raw()))
        return self

    def write_raw(self, chunks: Iterable[str]) -> None:
        """
        Write serialized chunks to a temp file next to the destination, then
        rename it into place. If ``chunks`` raises, the old file is kept.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=".rules-", suffix=".json", dir=str(self.path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                for chunk in chunks:
                    f.write(chunk)
            os.chmod(tmp, self._file_mode())
            os.replace(tmp, self.path)
        except BaseException:
            os.unlink(tmp)
            raise
        log.info("Saved rules file: %s (bytes=%s)", self.path, self.path.stat().st_size)

    def _file_mode(self) -> int:
        """Mode for a rewritten list: keep the current one, else 0666 minus umask."""
        try:
            return stat.S_IMODE(self.path.stat().st_mode)
        except FileNotFoundError:
            return 0o666 & ~_current_umask()

    def last_modified(self) -> datetime:
        """Modification time of the persisted list. Raises OSError if absent."""
        return datetime.fromtimestamp(self.path.stat().st_mtime, tz=timezone.utc)

    def days_since_update(self, now: Optional[datetime] = None) -> int:
        now = now or datetime.now(timezone.utc)
        return (now - self.last_modified()).days


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


_default: Optional[RuleStore] = None
_default_lock = threading.Lock()


def default_store() -> RuleStore:
    """Process-wide store, loaded from the packaged rules file on first use."""
    global _default
    if _default is None:
        with _default_lock:
            if _default is None:
                _default = RuleStore().load()
    return _default


def set_default_store(store: RuleStore) -> None:
    """Replace the process-wide store (e.g. with one built from config)."""
    global _default
    with _default_lock:
        _default = store
