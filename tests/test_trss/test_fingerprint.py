"""Tests for URL canonicalisation and fingerprints."""
from __future__ import annotations

import pytest

from hotbrew.trss.fingerprint import canonical_url, fallback_key, fingerprint, generate_id


class TestCanonicalURL:
    def test_strips_tracking_params(self):
        url = "https://example.com/post?utm_source=hn&utm_medium=social&id=7"
        assert canonical_url(url) == "https://example.com/post?id=7"

    def test_drops_fragment(self):
        assert canonical_url("https://example.com/post#comments") == "https://example.com/post"

    def test_lowercases_scheme_and_host(self):
        assert canonical_url("HTTPS://Example.COM/Path") == "https://example.com/Path"

    def test_removes_trailing_slash_except_root(self):
        assert canonical_url("https://example.com/post/") == "https://example.com/post"
        assert canonical_url("https://example.com/") == "https://example.com/"

    def test_sorts_remaining_params(self):
        assert canonical_url("https://e.com/?b=2&a=1") == "https://e.com/?a=1&b=2"

    def test_tracking_variants_compare_equal(self):
        a = canonical_url("https://example.com/x?ref=twitter")
        b = canonical_url("https://EXAMPLE.com/x/#top")
        assert a == b

    def test_empty(self):
        assert canonical_url("") == ""


class TestFingerprint:
    def test_prefix_and_length(self):
        fp = fingerprint("https://example.com/post")
        assert fp.startswith("sha256:")
        assert len(fp) == len("sha256:") + 64

    def test_stable(self):
        assert fingerprint("abc") == fingerprint("abc")
        assert fingerprint("abc") != fingerprint("abd")

    def test_generate_id_is_short_prefix_of_fingerprint(self):
        item_id = generate_id("abc")
        assert len(item_id) == len("sha256:") + 12
        assert fingerprint("abc").startswith(item_id)

    @pytest.mark.parametrize("title,source", [("Hello", "HN"), ("", "")])
    def test_fallback_key(self, title, source):
        assert fallback_key(title, source) == f"{title}||{source}"
