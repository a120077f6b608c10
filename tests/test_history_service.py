"""Tests for the bounded session history."""

import pytest

from legalinsight.services.analysis_parser import AnalysisParser
from legalinsight.services.history_service import HistoryService


@pytest.fixture
def parser() -> AnalysisParser:
    return AnalysisParser()


def _analysis(parser: AnalysisParser, index: int):
    return parser.parse(f"primary domain: Domain {index}", f"case {index}")


class TestHistoryService:
    """Test the HistoryService."""

    def test_bounded_to_twenty_newest_first(self, parser):
        history = HistoryService(max_items=20)
        saved = [_analysis(parser, i) for i in range(25)]
        for analysis in saved:
            history.save(analysis)

        items = history.list()
        assert len(items) == 20
        assert [item.id for item in items] == [a.id for a in reversed(saved[5:])]
        for evicted in saved[:5]:
            assert history.get_analysis(evicted.id) is None

    def test_history_item_summary_fields(self, parser):
        history = HistoryService()
        analysis = parser.parse("primary domain: Tax. success probability: HIGH", "my case")
        item = history.save(analysis)
        assert item.id == analysis.id
        assert item.timestamp == analysis.timestamp
        assert item.inputSummary == "my case"
        assert item.primaryDomain == "Tax"
        assert item.successProbability == "HIGH"
        assert item.analysis is analysis

    def test_get_analysis_and_clear(self, parser):
        history = HistoryService()
        analysis = _analysis(parser, 1)
        history.save(analysis)
        assert history.get_analysis(analysis.id) == analysis
        assert history.get_analysis("missing") is None

        history.clear()
        assert len(history) == 0
        assert history.list() == []

    def test_list_returns_copy(self, parser):
        history = HistoryService()
        history.save(_analysis(parser, 1))
        history.list().clear()
        assert len(history) == 1

    def test_json_snapshot_round_trip_restores_timestamps(self, parser):
        history = HistoryService()
        for i in range(3):
            history.save(_analysis(parser, i))

        restored = HistoryService()
        restored.load_json(history.dump_json())
        assert [item.id for item in restored.list()] == [item.id for item in history.list()]
        assert restored.list()[0].timestamp == history.list()[0].timestamp
        assert restored.list()[0].analysis.classification.primaryDomain == "Domain 2"

    @pytest.mark.parametrize("raw", [None, "", "not json", '{"a": 1}', "[1, 2]"])
    def test_corrupt_snapshot_loads_empty(self, raw):
        history = HistoryService()
        history.load_json(raw)
        assert history.list() == []

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            HistoryService(max_items=0)
