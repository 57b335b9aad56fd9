from __future__ import annotations

import json
import logging

import pytest

from tests.helpers.fakes import FailingProvider, FakeProvider, FullAwareProvider
from tests.helpers.log_assertions import read_jsonl


def _registry(*pairs):
    from memstats.core.stats.provider import ProviderRegistry

    return ProviderRegistry(list(pairs))


def test_no_providers_gives_minimal_envelope():
    from memstats.core.stats.assembler import ReportAssembler

    res = ReportAssembler().assemble(_registry())
    assert res.text == '{"memory_stats":{}}'
    assert res.entries == 0
    assert res.faults == ()


def test_single_provider_exact_text():
    from memstats.core.stats.assembler import ReportAssembler

    res = ReportAssembler().assemble(_registry(("x", FakeProvider(text='"a":1'))))
    assert res.text == '{"memory_stats":{"x":{"a":1}}}'


def test_providers_called_once_in_registry_order():
    from memstats.core.stats.assembler import ReportAssembler

    log = []
    a = FakeProvider(text='"n":1', log=log, name="a")
    b = FakeProvider(text='"n":2', log=log, name="b")
    c = FakeProvider(text='"n":3', log=log, name="c")
    res = ReportAssembler().assemble(_registry(("a", a), ("b", b), ("c", c)))
    assert log == ["a", "b", "c"]
    assert res.text == '{"memory_stats":{"a":{"n":1},"b":{"n":2},"c":{"n":3}}}'
    assert list(json.loads(res.text)["memory_stats"].keys()) == ["a", "b", "c"]


def test_full_flag_passed_through_unchanged():
    from memstats.core.stats.assembler import ReportAssembler

    p = FakeProvider()
    detail = FullAwareProvider()
    asm = ReportAssembler()
    short = asm.assemble(_registry(("p", p), ("d", detail)), full=False)
    full = asm.assemble(_registry(("p", p), ("d", detail)), full=True)
    assert p.calls == [False, True]
    assert json.loads(short.text)["memory_stats"]["d"] == {"count": 2}
    assert json.loads(full.text)["memory_stats"]["d"] == {"count": 2, "items": ["a", "b"]}


def test_failing_provider_degrades_only_its_entry(error_reporter, quiet_logger, caplog):
    from memstats.core.stats.assembler import ReportAssembler

    asm = ReportAssembler(error_reporter=error_reporter, logger=quiet_logger)
    reg = _registry(("a", FakeProvider(text='"n":1')), ("bad", FailingProvider(message="token=hunter2")), ("c", FakeProvider(text='"n":3')))
    with caplog.at_level(logging.WARNING, logger="memstats_test"):
        res = asm.assemble(reg)

    doc = json.loads(res.text)["memory_stats"]
    assert list(doc.keys()) == ["a", "bad", "c"]
    assert doc["a"] == {"n": 1}
    assert doc["bad"] == {"error": "provider_fault"}
    assert doc["c"] == {"n": 3}
    assert res.faults == ("bad",)
    assert "hunter2" not in res.text
    assert any("provider=bad" in r.getMessage() for r in caplog.records)

    rows = read_jsonl(error_reporter.path)
    assert rows[-1]["error_code"] == "provider_fault"
    assert rows[-1]["subsystem"] == "provider"
    assert rows[-1]["safe_context"]["provider"] == "bad"


def test_non_string_fragment_is_a_fault():
    from memstats.core.stats.assembler import ReportAssembler

    class Bytes:
        def memory_stats(self, output, full=False):
            output.append(b'"a":1')

    res = ReportAssembler().assemble(_registry(("b", Bytes())))
    assert json.loads(res.text) == {"memory_stats": {"b": {"error": "provider_fault"}}}


def test_fragment_validation_and_custom_marker():
    from memstats.core.config import StatsSettings
    from memstats.core.stats.assembler import ReportAssembler

    settings = StatsSettings(validate_fragments=True, fault_marker_key="fault")
    reg = _registry(("ok", FakeProvider(text='"a":[1,2]')), ("broken", FakeProvider(text='"a":1,')))
    res = ReportAssembler(settings=settings).assemble(reg)
    assert json.loads(res.text)["memory_stats"] == {"ok": {"a": [1, 2]}, "broken": {"fault": "provider_fault"}}
    assert res.faults == ("broken",)


def test_isolation_off_raises_provider_fault():
    from memstats.core.config import StatsSettings
    from memstats.core.errors import ProviderFaultError
    from memstats.core.stats.assembler import ReportAssembler

    asm = ReportAssembler(settings=StatsSettings(isolate_provider_faults=False))
    with pytest.raises(ProviderFaultError) as ei:
        asm.assemble(_registry(("bad", FailingProvider())))
    assert ei.value.context["provider"] == "bad"
    assert isinstance(ei.value.__cause__, RuntimeError)


@pytest.mark.parametrize("n", [0, 1, 2, 7, 63])
def test_any_number_of_providers_parses(n):
    from memstats.core.stats.assembler import ReportAssembler

    pairs = [(f"p{i}", FakeProvider(text=f'"i":{i}' if i % 3 else "")) for i in range(n)]
    res = ReportAssembler().assemble(_registry(*pairs))
    doc = json.loads(res.text)
    assert list(doc["memory_stats"].keys()) == [f"p{i}" for i in range(n)]
    assert not res.text.startswith('{"memory_stats":{,')
    assert ",}" not in res.text


def test_non_finite_counter_degrades_only_that_entry():
    from memstats.core.stats.assembler import ReportAssembler
    from memstats.core.stats.provider import CounterProvider

    class Ratio(CounterProvider):
        def __init__(self, value):
            self.value = value

        def counters(self, full):
            return [("ratio", self.value)]

    reg = _registry(("nan", Ratio(float("nan"))), ("inf", Ratio(float("inf"))), ("ok", Ratio(0.5)))
    res = ReportAssembler().assemble(reg)

    def strict(token):
        raise ValueError(token)

    doc = json.loads(res.text, parse_constant=strict)["memory_stats"]
    assert doc == {"nan": {"error": "provider_fault"}, "inf": {"error": "provider_fault"}, "ok": {"ratio": 0.5}}
    assert res.faults == ("nan", "inf")
