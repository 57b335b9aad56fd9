from __future__ import annotations

import json

import pytest


def test_empty_envelope():
    from memstats.core.stats.envelope import EnvelopeBuilder

    assert EnvelopeBuilder().build() == '{"memory_stats":{}}'


def test_separators_only_between_entries():
    from memstats.core.stats.envelope import EnvelopeBuilder

    b = EnvelopeBuilder()
    b.add_entry("a", ['"x":1'])
    b.add_entry("b", [])
    b.add_entry("c", ['"y":', "2"])
    out = b.build()
    assert out == '{"memory_stats":{"a":{"x":1},"b":{},"c":{"y":2}}}'
    assert ",," not in out
    assert json.loads(out)["memory_stats"]["c"] == {"y": 2}
    assert len(b) == 3


def test_build_is_stable_and_closes_builder():
    from memstats.core.stats.envelope import EnvelopeBuilder

    b = EnvelopeBuilder()
    b.add_entry("a", [])
    first = b.build()
    assert b.build() == first
    with pytest.raises(RuntimeError):
        b.add_entry("b", [])


def test_duplicate_and_invalid_keys_rejected():
    from memstats.core.errors import DuplicateProviderError, InvalidProviderNameError
    from memstats.core.stats.envelope import EnvelopeBuilder

    b = EnvelopeBuilder()
    b.add_entry("a", [])
    with pytest.raises(DuplicateProviderError):
        b.add_entry("a", [])
    with pytest.raises(InvalidProviderNameError):
        b.add_entry('bad"name', [])
    with pytest.raises(InvalidProviderNameError):
        b.add_entry("", [])
