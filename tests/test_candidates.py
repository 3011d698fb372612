"""Test bounded candidate counting."""

import itertools
import json

from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.document import Document

from idlecomplete.candidates import CandidateCounter, CompleterSource


def counter_over(items, logger, make_source):
    return CandidateCounter(lambda: make_source(lambda: items), logger=logger)


class TestCandidateCounter:

    def test_count_below_bound(self, logger, make_source):
        result = counter_over(["a", "b", "c"], logger, make_source).count(10)
        assert result.count == 3
        assert result.exceeded_bound is False

    def test_count_exactly_bound(self, logger, make_source):
        result = counter_over(list(range(10)), logger, make_source).count(10)
        assert result.count == 10
        assert result.exceeded_bound is False
        assert result.examined == 10

    def test_count_one_over_bound(self, logger, make_source):
        result = counter_over(list(range(11)), logger, make_source).count(10)
        assert result.exceeded_bound is True
        assert result.count == 10
        assert result.examined == 11

    def test_stops_after_bound_plus_one(self, logger, make_source):
        """An endless source is only pulled bound + 1 times."""
        pulled = []

        def endless():
            for i in itertools.count():
                pulled.append(i)
                yield i

        counter = CandidateCounter(lambda: make_source(endless), logger=logger)
        result = counter.count(1000)

        assert result.exceeded_bound is True
        assert result.examined == 1001
        assert len(pulled) == 1001

    def test_empty_source(self, logger, make_source):
        result = counter_over([], logger, make_source).count(10)
        assert result.count == 0
        assert result.exceeded_bound is False

    def test_source_is_queried_every_call(self, logger, make_source):
        items = ["a"]
        counter = CandidateCounter(lambda: make_source(lambda: list(items)), logger=logger)
        assert counter.count(5).count == 1
        items.extend(["b", "c"])
        assert counter.count(5).count == 3

    def test_enumeration_failure_counts_as_zero(self, logger, make_source):
        def broken():
            yield "a"
            raise ValueError("table gone")

        counter = CandidateCounter(lambda: make_source(broken), logger=logger)
        result = counter.count(10)

        assert result.count == 0
        assert result.exceeded_bound is False

        entries = [json.loads(line) for line in logger.log_path.read_text().splitlines()]
        assert entries[-1]["type"] == "error"
        assert entries[-1]["kind"] == "candidate_source_failure"

    def test_source_lookup_failure_counts_as_zero(self, logger):
        def no_table():
            raise RuntimeError("no prompt")

        counter = CandidateCounter(no_table, logger=logger)
        assert counter.count(10).count == 0


class TestCompleterSource:

    def test_enumerates_completer(self):
        completer = WordCompleter(["apple", "apricot", "banana"])
        source = CompleterSource(completer, Document("ap"))
        texts = [c.text for c in source.enumerate_up_to(10)]
        assert texts == ["apple", "apricot"]

    def test_without_completer(self):
        source = CompleterSource(None, Document("ap"))
        assert list(source.enumerate_up_to(10)) == []
