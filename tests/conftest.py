# tests/conftest.py
from __future__ import annotations
import json
import types
import pytest

from regdomain.config import Config
from regdomain.rules import ingest
from regdomain.store import RuleStore


PSL_TEXT = """\
// This Source Code Form is subject to the terms of the Mozilla Public
// License, v. 2.0.

// ===BEGIN ICANN DOMAINS===

// com : https://en.wikipedia.org/wiki/.com
com

io
// ck : https://en.wikipedia.org/wiki/.ck
*.ck
!www.ck

jp
*.kawasaki.jp
!city.kawasaki.jp

uk
co.uk  registered companies

// xn--p1ai ("rf", Russian-Cyrillic) : RU
рф

// ===END ICANN DOMAINS===
// ===BEGIN PRIVATE DOMAINS===

// GitHub, Inc.
github.io
blogspot.com
// ===END PRIVATE DOMAINS===
"""

RAW_RULES = [
    "com", "io", "*.ck", "!www.ck", "jp", "*.kawasaki.jp", "!city.kawasaki.jp",
    "uk", "co.uk", "рф", "github.io", "blogspot.com",
]

ICANN_RULES = RAW_RULES[:-2]

SUFFIX_LIST_URL = "https://publicsuffix.org/list/effective_tld_names.dat"


@pytest.fixture
def rules():
    return ingest(RAW_RULES)


@pytest.fixture
def rules_file(tmp_path):
    return tmp_path / "data" / "rules.json"


@pytest.fixture
def store(rules_file) -> RuleStore:
    rules_file.parent.mkdir(parents=True, exist_ok=True)
    rules_file.write_text(json.dumps(RAW_RULES, ensure_ascii=False), encoding="utf-8")
    return RuleStore(rules_file).load()


@pytest.fixture
def tmp_config(tmp_path, rules_file) -> Config:
    cfg = {
        "rules_file": str(rules_file),
        "update": {
            "url": SUFFIX_LIST_URL,
            "also_private_domains": True,
            "timeout_seconds": 5,
        },
        "logging": {
            "level": "DEBUG",
            "console": True,
        },
    }
    return Config(cfg)


# --- Simple fake response object for requests.get ---
class FakeResp:
    def __init__(self, status=200, text="", content=b"", headers=None, stream=False, chunk_size=65536):
        self.status_code = status
        self.text = text
        self._content = content
        self.headers = headers or {}
        self._iter = None
        if stream:
            buf = content if content else text.encode("utf-8")
            chunks = [buf[i:i+chunk_size] for i in range(0, len(buf), chunk_size)]
            self._iter = iter(chunks)

    def raise_for_status(self):
        if not (200 <= self.status_code < 300):
            raise RuntimeError(f"HTTP {self.status_code}")

    def iter_content(self, chunk_size=65536):
        if self._iter is None:
            yield self._content if self._content else self.text.encode("utf-8")
        else:
            yield from self._iter

    def __enter__(self): return self
    def __exit__(self, *exc): return False


@pytest.fixture
def fake_requests(monkeypatch):
    """
    Registry-based stub for requests.get keyed by URL.
    """
    registry_get = {}
    calls = []

    def _get(url, *args, **kwargs):
        calls.append((url, kwargs))
        return registry_get.get(url, FakeResp(404, "not found"))

    def register_get(url, resp: FakeResp):
        registry_get[url] = resp

    monkeypatch.setattr("requests.get", _get)
    ns = types.SimpleNamespace(register_get=register_get, calls=calls, FakeResp=FakeResp)
    return ns
