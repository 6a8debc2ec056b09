import pytest

from cfdk.domains import extract_domains, resolve_context
from cfdk.errors import ResolutionInvariantError
from cfdk.state import ContextEntry


def contexts(**domains):
    return {key: ContextEntry(name=key, domain=d, env=f"env-{key}") for key, d in domains.items()}


def test_shared_domains_collapse_in_first_seen_order():
    ctxs = contexts(ctxA="prod-us", ctxB="prod-eu", ctxC="prod-us")
    assert extract_domains(ctxs) == ["prod-us", "prod-eu"]


def test_extract_is_stable():
    ctxs = contexts(a="x", b="y", c="x", d="z", e="y")
    first = extract_domains(ctxs)
    assert first == ["x", "y", "z"]
    assert all(extract_domains(ctxs) == first for _ in range(5))


def test_every_domain_appears_once():
    ctxs = contexts(a="1", b="2", c="2", d="3", e="1", f="")
    domains = extract_domains(ctxs)
    assert sorted(domains) == sorted({c.domain for c in ctxs.values()})
    assert len(domains) == len(set(domains))


def test_empty_domain_is_selectable():
    assert extract_domains(contexts(a="", b="x")) == ["", "x"]
    assert resolve_context(contexts(a="x", b=""), "") == "b"


def test_no_contexts_no_domains():
    assert extract_domains({}) == []


def test_first_context_wins_for_shared_domain():
    ctxs = contexts(ctxA="prod-us", ctxB="prod-eu", ctxC="prod-us")
    assert resolve_context(ctxs, "prod-us") == "ctxA"
    assert resolve_context(ctxs, "prod-eu") == "ctxB"


def test_resolution_follows_key_order_not_names():
    ctxs = contexts(zeta="d", alpha="d")
    assert resolve_context(ctxs, "d") == "zeta"


def test_unknown_domain_is_an_invariant_error():
    with pytest.raises(ResolutionInvariantError, match="nowhere"):
        resolve_context(contexts(a="x"), "nowhere")
