"""Tests for response normalization and defaulting."""

import json

import pytest

from legalinsight.models.legal_schemas import ANALYSIS_DEFAULTS, CaseAnalysis
from legalinsight.services.analysis_parser import AnalysisParser, parse_analysis_response


def _sections(analysis: CaseAnalysis) -> dict:
    data = analysis.model_dump(mode="json")
    return {section: data[section] for section in ANALYSIS_DEFAULTS}


def _with_override(section: str, field: str, value) -> dict:
    expected = json.loads(json.dumps(ANALYSIS_DEFAULTS))
    expected[section][field] = value
    return expected


@pytest.fixture
def parser() -> AnalysisParser:
    return AnalysisParser(summary_length=150)


class TestTotalDefaulting:
    @pytest.mark.parametrize("raw", ["", "   ", "\n\t\n"])
    def test_empty_input_yields_all_defaults(self, parser, raw):
        analysis = parser.parse(raw, "case")
        assert _sections(analysis) == ANALYSIS_DEFAULTS

    def test_every_leaf_field_present(self, parser):
        data = parser.parse("", "case").model_dump()
        for section, defaults in ANALYSIS_DEFAULTS.items():
            for field in defaults:
                assert data[section][field] is not None

    def test_defaults_are_not_shared_between_records(self, parser):
        first = parser.parse("", "case")
        first.factEvidence.keyFacts.append("mutated")
        second = parser.parse("", "case")
        assert second.factEvidence.keyFacts == ["Facts to be analyzed from provided documents"]


class TestJsonExtraction:
    def test_fenced_block_scenario(self, parser):
        raw = '```json\n{"riskOutcome":{"successProbability":"HIGH"}}\n```'
        analysis = parser.parse(raw, "case")
        assert analysis.riskOutcome.successProbability == "HIGH"
        assert _sections(analysis) == _with_override("riskOutcome", "successProbability", "HIGH")

    def test_fenced_block_with_surrounding_prose(self, parser):
        raw = 'Here is the analysis:\n```json\n{"classification":{"primaryDomain":"Family"}}\n```\nGood luck.'
        assert parser.parse(raw, "case").classification.primaryDomain == "Family"

    def test_whole_text_json(self, parser, full_analysis_json):
        analysis = parser.parse(json.dumps(full_analysis_json), "case")
        assert _sections(analysis) == full_analysis_json

    def test_non_object_json_is_treated_as_empty(self, parser):
        assert _sections(parser.parse("[1, 2, 3]", "case")) == ANALYSIS_DEFAULTS

    def test_falsy_values_fall_back_to_defaults(self, parser):
        raw = json.dumps({
            "classification": {"primaryDomain": "", "complexityScore": 0, "secondaryDomains": []},
            "jurisdiction": {"limitationDetails": None},
        })
        analysis = parser.parse(raw, "case")
        assert analysis.classification.primaryDomain == "General Legal Matter"
        assert analysis.classification.complexityScore == 0.5
        assert analysis.classification.secondaryDomains == []
        assert analysis.jurisdiction.limitationDetails == ""

    def test_invalid_enum_values_fall_back(self, parser):
        raw = json.dumps({
            "factEvidence": {"evidenceStrength": "Overwhelming"},
            "jurisdiction": {"limitationStatus": "time-barred"},
            "riskOutcome": {"successProbability": "high"},
        })
        analysis = parser.parse(raw, "case")
        assert analysis.factEvidence.evidenceStrength == "Moderate"
        assert analysis.jurisdiction.limitationStatus == "Time-barred"
        assert analysis.riskOutcome.successProbability == "HIGH"

    def test_wrong_types_are_coerced_or_defaulted(self, parser):
        raw = json.dumps({
            "classification": {"confidenceScore": "0.95", "complexityScore": "hard", "proceduralStage": 3},
            "legalProvisions": {"applicableSections": "Section 302", "misusedSections": [498, None]},
            "precedents": {"relevantCases": [{"name": "A v. B"}, "not a case"]},
            "winningStrategy": "just win",
        })
        analysis = parser.parse(raw, "case")
        assert analysis.classification.confidenceScore == 0.95
        assert analysis.classification.complexityScore == 0.5
        assert analysis.classification.proceduralStage == "3"
        assert analysis.legalProvisions.applicableSections == []
        assert analysis.legalProvisions.misusedSections == ["498"]
        assert len(analysis.precedents.relevantCases) == 1
        assert analysis.precedents.relevantCases[0].name == "A v. B"
        assert analysis.precedents.relevantCases[0].citation == ""
        assert analysis.winningStrategy.overview == "Strategy to be determined based on case details."

    def test_deeply_nested_input_falls_back_to_defaults(self, parser):
        analysis = parser.parse("[" * 100000, "x")
        assert _sections(analysis) == ANALYSIS_DEFAULTS

    def test_overlong_number_falls_back_to_default(self, parser):
        analysis = parser.parse('{"classification":{"complexityScore": ' + "1" * 5000 + "}}", "x")
        assert analysis.classification.complexityScore == 0.5


class TestHeuristicFallback:
    def test_labeled_fields_scenario(self, parser):
        raw = "The primary domain: Consumer Protection. success probability: LOW."
        analysis = parser.parse(raw, "case")
        assert analysis.classification.primaryDomain == "Consumer Protection"
        assert analysis.riskOutcome.successProbability == "LOW"

        expected = _with_override("classification", "primaryDomain", "Consumer Protection")
        expected["riskOutcome"]["successProbability"] = "LOW"
        assert _sections(analysis) == expected

    def test_case_insensitive_labels(self, parser):
        raw = "Summary\nPRIMARY DOMAIN:   Labour Law, with service angles\nSuccess Probability: high"
        analysis = parser.parse(raw, "case")
        assert analysis.classification.primaryDomain == "Labour Law"
        assert analysis.riskOutcome.successProbability == "HIGH"

    def test_probability_outside_enumeration_is_ignored(self, parser):
        analysis = parser.parse("success probability: VERY HIGH", "case")
        assert analysis.riskOutcome.successProbability == "MEDIUM"

    def test_broken_fence_uses_heuristics(self, parser):
        raw = '```json\n{"classification": {"primaryDomain": "Cyber"\n```\nprimary domain: Cyber Crime'
        assert parser.parse(raw, "case").classification.primaryDomain == "Cyber Crime"


class TestIdentity:
    def test_raw_analysis_and_fresh_ids(self, parser):
        first = parser.parse("text", "case")
        second = parser.parse("text", "case")
        assert first.rawAnalysis == "text"
        assert first.id != second.id
        assert first.timestamp.tzinfo is not None

    def test_short_input_not_truncated(self, parser):
        assert parser.parse("", "x" * 150).inputSummary == "x" * 150

    def test_long_input_truncated_with_marker(self, parser):
        assert parser.parse("", "y" * 151).inputSummary == "y" * 150 + "..."

    def test_record_is_immutable(self, parser):
        analysis = parser.parse("", "case")
        with pytest.raises(Exception):
            analysis.rawAnalysis = "changed"


def test_module_level_helper():
    analysis = parse_analysis_response('{"precedents": {"judicialAttitude": "Sympathetic"}}', "case")
    assert analysis.precedents.judicialAttitude == "Sympathetic"
