"""
Testing secret generation.
- Trick: pass a scripted rand_below so the shuffle is predictable.
- Trick: monkeypatch requests.get so random.org is never contacted.
"""

import pytest
import requests

import mastermind.random_client as random_client
from mastermind.random_client import fetch_secret, generate_secret, secret_source

def _assert_valid_code(code):
    assert len(code) == 4
    assert len(set(code)) == 4
    assert all(c in "0123456789" for c in code)

def test_generated_secrets_are_valid():
    seen = set()
    for _ in range(500):
        code = generate_secret()
        _assert_valid_code(code)
        seen.add(code)
    # 5040 possible codes; 500 draws should not keep repeating a handful
    assert len(seen) > 100

def test_shuffle_without_swaps_keeps_alphabet_order():
    # j == i every step, so nothing moves
    assert generate_secret(rand_below=lambda n: n - 1) == "0123"

def test_shuffle_always_swapping_with_front():
    # each step moves the current front digit back, leaving 1,2,3,4 in front
    assert generate_secret(rand_below=lambda n: 0) == "1234"

def test_shuffle_asks_for_each_range_once():
    calls = []

    def rand_below(n):
        calls.append(n)
        return 0

    generate_secret(rand_below=rand_below)
    assert calls == [10, 9, 8, 7, 6, 5, 4, 3, 2]

class _FakeResponse:
    def __init__(self, text, status_ok=True):
        self.text = text
        self.status_ok = status_ok

    def raise_for_status(self):
        if not self.status_ok:
            raise requests.HTTPError("503 Service Unavailable")

def _offline(url, params, timeout):
    raise requests.ConnectionError("offline")

def test_fetch_secret_uses_random_org_sequence(monkeypatch):
    captured = {}

    def fake_get(url, params, timeout):
        captured["url"] = url
        captured["params"] = params
        return _FakeResponse("7\n0\n3\n9\n1\n2\n4\n5\n6\n8\n")

    monkeypatch.setattr(random_client.requests, "get", fake_get)

    assert fetch_secret() == "7039"
    assert captured["url"] == random_client.SEQUENCES_URL
    assert captured["params"]["min"] == 0
    assert captured["params"]["max"] == 9

@pytest.mark.parametrize(
    "fake_get",
    [
        _offline,
        lambda url, params, timeout: _FakeResponse("", status_ok=False),
        lambda url, params, timeout: _FakeResponse("1\n2\n3\n"),
        lambda url, params, timeout: _FakeResponse("1\n1\n2\n3\n4\n5\n6\n7\n8\n9\n"),
        lambda url, params, timeout: _FakeResponse("<html>rate limited</html>"),
    ],
)
def test_fetch_secret_falls_back_to_local_shuffle(monkeypatch, fake_get):
    monkeypatch.setattr(random_client.requests, "get", fake_get)
    monkeypatch.setattr(random_client, "generate_secret", lambda: "5678")

    assert fetch_secret() == "5678"

def test_secret_source_lookup():
    assert secret_source("local") is generate_secret
    assert secret_source("random_org") is fetch_secret
    with pytest.raises(ValueError):
        secret_source("dice")
