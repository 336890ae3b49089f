# tests/unit/cache/test_unit_fingerprint.py — v1
"""Tests for cache/fingerprint.py — key derivation and group tags."""

from __future__ import annotations

import hashlib

import pytest

from servicecache.cache.fingerprint import (
    FINGERPRINT_PREFIX,
    build_fingerprint,
    encode_params,
    group_tag,
    service_identity,
    tracking_key,
)


class Alpha:
    pass


class Beta:
    pass


def _fp(**overrides):
    args = dict(
        identity="app.services.Users",
        operation="list",
        path="users",
        query_params={"page": "1"},
        extra_params=None,
        caller_id=None,
    )
    args.update(overrides)
    return build_fingerprint(**args)


class TestServiceIdentity:
    def test_uses_type_name(self):
        assert service_identity(Alpha()) == f"{__name__}.Alpha"

    def test_class_and_instance_agree(self):
        assert service_identity(Alpha) == service_identity(Alpha())

    def test_distinct_types_differ(self):
        assert service_identity(Alpha()) != service_identity(Beta())

    def test_instances_share_identity(self):
        assert service_identity(Alpha()) == service_identity(Alpha())


class TestBuildFingerprint:
    def test_format(self):
        key = _fp()
        assert key.startswith(FINGERPRINT_PREFIX)
        digest = key[len(FINGERPRINT_PREFIX):]
        assert len(digest) == 40
        assert all(c in "0123456789abcdef" for c in digest)

    def test_matches_documented_layout(self):
        raw = "app.services.Users|list|users|page=1&sort=name"
        expected = FINGERPRINT_PREFIX + hashlib.sha1(raw.encode()).hexdigest()  # noqa: S324
        assert _fp(query_params={"sort": "name", "page": "1"}) == expected

    def test_deterministic(self):
        assert _fp() == _fp()

    def test_insertion_order_independent(self):
        a = _fp(query_params={"a": 1, "b": 2}, extra_params={"x": 1, "y": 2})
        b = _fp(query_params={"b": 2, "a": 1}, extra_params={"y": 2, "x": 1})
        assert a == b

    @pytest.mark.parametrize(
        "change",
        [
            {"identity": "app.services.Orders"},
            {"operation": "show"},
            {"path": "users/1"},
            {"query_params": {"page": "2"}},
            {"extra_params": {"filter": "active"}},
            {"caller_id": 3},
        ],
    )
    def test_sensitive_to_every_component(self, change):
        assert _fp(**change) != _fp()

    def test_distinct_callers_differ(self):
        assert _fp(caller_id=3) != _fp(caller_id=4)

    def test_extra_params_override_query(self):
        overridden = _fp(query_params={"page": "1"}, extra_params={"page": "9"})
        assert overridden == _fp(query_params={"page": "9"})

    def test_caller_id_uses_reserved_key(self):
        # A user_id parameter and a caller id collapse to the same key.
        assert _fp(caller_id=5) == _fp(query_params={"page": "1", "user_id": 5})

    def test_none_params_equal_empty(self):
        assert _fp(extra_params=None) == _fp(extra_params={})

    def test_fixed_length_for_large_inputs(self):
        big = {f"k{i}": "v" * 100 for i in range(200)}
        assert len(_fp(query_params=big)) == len(_fp())


class TestEncodeParams:
    def test_percent_encodes_values(self):
        assert encode_params({"q": "a b&c=d"}) == "q=a+b%26c%3Dd"

    def test_multibyte_values(self):
        assert encode_params({"city": "Zürich"}) == "city=Z%C3%BCrich"

    def test_empty_and_numeric_values(self):
        assert encode_params({"a": "", "b": 0, "c": 1.5}) == "a=&b=0&c=1.5"

    def test_none_dropped(self):
        assert encode_params({"a": None, "b": "x"}) == "b=x"

    def test_booleans(self):
        assert encode_params({"on": True, "off": False}) == "on=1&off=0"

    def test_sequences_and_mappings(self):
        encoded = encode_params({"ids": [1, 2], "f": {"name": "x"}})
        assert encoded == "ids%5B%5D=1&ids%5B%5D=2&f%5Bname%5D=x"

    def test_keeps_given_order(self):
        assert encode_params({"b": 1, "a": 2}) == "b=1&a=2"


class TestGroupTag:
    def test_digest_of_identity(self):
        identity = "app.services.Users"
        assert group_tag(identity) == hashlib.sha1(identity.encode()).hexdigest()  # noqa: S324

    def test_stable_and_distinct(self):
        assert group_tag("a.A") == group_tag("a.A")
        assert group_tag("a.A") != group_tag("a.B")

    def test_tracking_key(self):
        tag = group_tag("a.A")
        assert tracking_key(tag) == f"service-cache-tracking:{tag}"
