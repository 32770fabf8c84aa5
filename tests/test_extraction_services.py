"""Tests for the extraction boundary: retries, timeouts and validation."""

import asyncio
import logging

import pytest

from atlas_dialogue.errors import ExtractionFailure, ValidationFailure
from atlas_dialogue.extraction.services import AnalysisServices, validate_understanding
from atlas_dialogue.models import EngineConfig, IntentType, Understanding


def _make_config(**overrides) -> EngineConfig:
    fields = dict(
        backoff_initial_seconds=0.0,
        backoff_max_seconds=0.0,
        extraction_timeout_seconds=0.5,
    )
    fields.update(overrides)
    return EngineConfig(**fields)


def _make_payload(**overrides) -> dict:
    payload = {
        "primary_intent": "product_search",
        "product_type": "mugs",
        "quantity": 100,
        "ambiguities": [],
        "confidence": {
            "overall": 0.7,
            "intent": 0.9,
            "context": 0.5,
            "specifications": 0.6,
        },
    }
    payload.update(overrides)
    return payload


class ScriptedExtractor:
    """Replays a list of outcomes; exceptions are raised, anything else returned."""

    def __init__(self, outcomes, delay: float = 0.0):
        self.outcomes = list(outcomes)
        self.delay = delay
        self.calls = 0

    async def extract(self, query, prior_understanding=None, history=None):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        outcome = self.outcomes[min(self.calls, len(self.outcomes)) - 1]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class BrokenAnalyzer:
    async def analyze_context(self, query, prior_understanding=None):
        raise RuntimeError("context service down")


class TestValidateUnderstanding:
    def test_dict_payload(self):
        understanding = validate_understanding(_make_payload())
        assert understanding.primary_intent == IntentType.PRODUCT_SEARCH
        assert understanding.quantity == 100

    def test_json_payload(self):
        understanding = validate_understanding(Understanding(**_make_payload()).model_dump_json())
        assert understanding.product_type == "mugs"

    def test_extra_field_is_validation_failure(self):
        with pytest.raises(ValidationFailure) as exc_info:
            validate_understanding(_make_payload(mood="cheerful"))
        assert exc_info.value.errors

    def test_unknown_enum_is_validation_failure(self):
        with pytest.raises(ValidationFailure):
            validate_understanding(_make_payload(primary_intent="haggle"))

    def test_malformed_json_is_extraction_failure(self):
        with pytest.raises(ExtractionFailure):
            validate_understanding("{not json")

    def test_wrong_type_is_extraction_failure(self):
        with pytest.raises(ExtractionFailure):
            validate_understanding(42)

    def test_duplicate_ambiguities_dropped_at_boundary(self, caplog):
        ambiguity = {
            "type": "quantity_scope",
            "description": "How many?",
            "confidence": 0.8,
            "impact": "medium",
            "resolution_urgency": "important",
        }
        with caplog.at_level(logging.DEBUG, logger="atlas_dialogue.extraction.services"):
            understanding = validate_understanding(
                _make_payload(ambiguities=[ambiguity, dict(ambiguity)])
            )
        assert len(understanding.ambiguities) == 1
        assert "Dropped 1 duplicate" in caplog.text

    def test_validation_failure_without_details(self):
        assert ValidationFailure("bad output").errors == []


class TestRetries:
    def test_transient_errors_are_retried(self):
        extractor = ScriptedExtractor([
            RuntimeError("503 from upstream"),
            RuntimeError("503 from upstream"),
            _make_payload(),
        ])
        services = AnalysisServices(extractor, config=_make_config())
        understanding = asyncio.run(services.extract_understanding("100 mugs"))
        assert understanding.product_type == "mugs"
        assert extractor.calls == 3

    def test_exhaustion_raises_extraction_failure(self):
        extractor = ScriptedExtractor([RuntimeError("down")])
        services = AnalysisServices(extractor, config=_make_config(extraction_max_attempts=2))
        with pytest.raises(ExtractionFailure):
            asyncio.run(services.extract_understanding("100 mugs"))
        assert extractor.calls == 2

    def test_timeout_is_extraction_failure(self):
        extractor = ScriptedExtractor([_make_payload()], delay=0.2)
        config = _make_config(extraction_timeout_seconds=0.01, extraction_max_attempts=2)
        services = AnalysisServices(extractor, config=config)
        with pytest.raises(ExtractionFailure):
            asyncio.run(services.extract_understanding("100 mugs"))
        assert extractor.calls == 2


class TestValidationRetry:
    def test_one_retry_then_success(self):
        extractor = ScriptedExtractor([_make_payload(primary_intent="haggle"), _make_payload()])
        services = AnalysisServices(extractor, config=_make_config())
        understanding = asyncio.run(services.extract_understanding("100 mugs"))
        assert understanding.primary_intent == IntentType.PRODUCT_SEARCH
        assert extractor.calls == 2

    def test_second_violation_is_raised(self):
        extractor = ScriptedExtractor([_make_payload(quantity=-1)])
        services = AnalysisServices(extractor, config=_make_config())
        with pytest.raises(ValidationFailure):
            asyncio.run(services.extract_understanding("100 mugs"))
        assert extractor.calls == 2

    def test_malformed_payload_exhausts_as_extraction_failure(self):
        extractor = ScriptedExtractor(["{not json"])
        services = AnalysisServices(extractor, config=_make_config())
        with pytest.raises(ExtractionFailure):
            asyncio.run(services.extract_understanding("100 mugs"))
        assert extractor.calls == 2


class TestAuxiliary:
    def test_missing_backend_returns_none(self):
        services = AnalysisServices(ScriptedExtractor([_make_payload()]), config=_make_config())
        assert asyncio.run(services.analyze_context("100 mugs")) is None
        assert asyncio.run(services.generate_insights("100 mugs")) is None

    def test_failure_degrades_to_none(self):
        services = AnalysisServices(
            ScriptedExtractor([_make_payload()]),
            context_analyzer=BrokenAnalyzer(),
            config=_make_config(),
        )
        assert asyncio.run(services.analyze_context("100 mugs")) is None
