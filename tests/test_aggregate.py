import time

from stacks_defi.aggregate import collect, dedupe


class StaticAdapter:
    def __init__(self, name, records, delay=0.0):
        self.name = name
        self.records = records
        self.delay = delay

    def fetch(self):
        time.sleep(self.delay)
        return self.records


class BrokenAdapter:
    name = "broken"

    def fetch(self):
        raise RuntimeError("boom")


def test_dedupe_keeps_first_occurrence():
    records = [{"name": "X", "source": "own"}, {"name": "X", "source": "defillama"}]
    assert dedupe(records) == [{"name": "X", "source": "own"}]


def test_dedupe_is_case_sensitive_and_preserves_order():
    records = [
        {"name": "ALEX", "source": "a"},
        {"name": "Velar", "source": "b"},
        {"name": "alex", "source": "c"},
        {"name": "Velar", "source": "d"},
        {"name": "ALEX", "source": "e"},
    ]
    assert [r["source"] for r in dedupe(records)] == ["a", "b", "c"]


def test_dedupe_empty():
    assert dedupe([]) == []


def test_collect_keeps_adapter_order_even_when_later_ones_finish_first():
    slow = StaticAdapter("slow", [{"name": "A"}], delay=0.05)
    fast = StaticAdapter("fast", [{"name": "B"}, {"name": "C"}])
    assert [r["name"] for r in collect([slow, fast])] == ["A", "B", "C"]


def test_collect_isolates_failing_adapters():
    records = collect([BrokenAdapter(), StaticAdapter("ok", [{"name": "Z"}])])
    assert records == [{"name": "Z"}]


def test_collect_treats_none_as_empty():
    assert collect([StaticAdapter("none", None)]) == []
    assert collect([]) == []
