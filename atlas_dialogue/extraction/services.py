"""
Analysis Services — the boundary between the decision layer and the
external understanding extraction capability.

Behavioral Contract:
- Every external call runs under a per-attempt timeout
- Service errors, timeouts and malformed output are ExtractionFailures and
  are retried with exponential backoff up to a bounded count
- Output is validated into a typed Understanding; schema violations are
  ValidationFailures and get exactly `validation_retries` more attempts
- Auxiliary analyses (context, business insights) degrade to None on failure
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional, Protocol, Union

from pydantic import BaseModel, ValidationError
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from atlas_dialogue.errors import DialogueError, ExtractionFailure, ValidationFailure
from atlas_dialogue.models.analysis import BusinessInsights, ContextAnalysis
from atlas_dialogue.models.clarification import ClarificationRecord
from atlas_dialogue.models.config import EngineConfig
from atlas_dialogue.models.understanding import Understanding

logger = logging.getLogger(__name__)


class UnderstandingExtractor(Protocol):
    """Protocol for understanding extraction — pluggable backend."""

    async def extract(
        self,
        query: str,
        prior_understanding: Optional[Understanding] = None,
        history: Optional[List[ClarificationRecord]] = None,
    ) -> Union[Understanding, dict, str]: ...


class ContextAnalyzer(Protocol):
    async def analyze_context(
        self,
        query: str,
        prior_understanding: Optional[Understanding] = None,
    ) -> Union[ContextAnalysis, dict]: ...


class InsightGenerator(Protocol):
    async def generate_insights(
        self,
        query: str,
        prior_understanding: Optional[Understanding] = None,
    ) -> Union[BusinessInsights, dict]: ...


def validate_record(raw: Any, model: type) -> BaseModel:
    """
    Coerce extractor output into `model`.

    Raises ExtractionFailure for output that is not a record at all
    (unparseable JSON, wrong type) and ValidationFailure for records that
    break the schema.
    """
    try:
        if isinstance(raw, model):
            return model.model_validate(raw.model_dump())
        if isinstance(raw, dict):
            return model.model_validate(raw)
        if isinstance(raw, (str, bytes)):
            return model.model_validate_json(raw)
    except ValidationError as e:
        errors = e.errors(include_url=False)
        if any(err.get("type") == "json_invalid" for err in errors):
            raise ExtractionFailure(f"Malformed {model.__name__} output: not valid JSON")
        raise ValidationFailure(
            f"{model.__name__} output violates schema ({e.error_count()} errors)",
            errors=errors,
        )
    raise ExtractionFailure(
        f"Malformed {model.__name__} output of type {type(raw).__name__}"
    )


def validate_understanding(raw: Any) -> Understanding:
    understanding = validate_record(raw, Understanding)
    if isinstance(raw, dict):
        dropped = len(raw.get("ambiguities") or []) - len(understanding.ambiguities)
        if dropped:
            logger.debug("Dropped %d duplicate or empty ambiguities", dropped)
    return understanding


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "Extraction attempt %d failed (%s); retrying",
        retry_state.attempt_number, exc,
    )


class AnalysisServices:
    """
    Explicitly constructed bundle of external analysis capabilities.

    Built once by the caller and handed to the orchestrator; there is no
    module-level service state.
    """

    def __init__(
        self,
        extractor: UnderstandingExtractor,
        context_analyzer: Optional[ContextAnalyzer] = None,
        insight_generator: Optional[InsightGenerator] = None,
        config: Optional[EngineConfig] = None,
    ):
        self.extractor = extractor
        self.context_analyzer = context_analyzer
        self.insight_generator = insight_generator
        self.config = config or EngineConfig()

    async def extract_understanding(
        self,
        query: str,
        prior_understanding: Optional[Understanding] = None,
        history: Optional[List[ClarificationRecord]] = None,
    ) -> Understanding:
        """
        Extract and validate an Understanding.

        Raises ExtractionFailure once transport retries are exhausted and
        ValidationFailure once validation retries are exhausted.
        """
        attempts = self.config.validation_retries + 1
        last_failure: Optional[ValidationFailure] = None
        for attempt in range(1, attempts + 1):
            raw = await self._call_with_retry(
                "extract",
                lambda: self.extractor.extract(
                    query, prior_understanding, list(history or [])
                ),
            )
            try:
                return validate_understanding(raw)
            except ValidationFailure as e:
                last_failure = e
                logger.warning(
                    "Extractor output failed validation (attempt %d of %d): %s",
                    attempt, attempts, e,
                )
            # ExtractionFailure from a malformed payload is retried like a transport error
            except ExtractionFailure:
                if attempt == attempts:
                    raise
        raise last_failure

    async def analyze_context(
        self,
        query: str,
        prior_understanding: Optional[Understanding] = None,
    ) -> Optional[ContextAnalysis]:
        if self.context_analyzer is None:
            return None
        return await self._auxiliary(
            "analyze_context",
            lambda: self.context_analyzer.analyze_context(query, prior_understanding),
            ContextAnalysis,
        )

    async def generate_insights(
        self,
        query: str,
        prior_understanding: Optional[Understanding] = None,
    ) -> Optional[BusinessInsights]:
        if self.insight_generator is None:
            return None
        return await self._auxiliary(
            "generate_insights",
            lambda: self.insight_generator.generate_insights(query, prior_understanding),
            BusinessInsights,
        )

    async def _auxiliary(
        self,
        name: str,
        call: Callable[[], Awaitable[Any]],
        model: type,
    ) -> Optional[BaseModel]:
        try:
            raw = await self._call_with_retry(name, call)
            return validate_record(raw, model)
        except (ExtractionFailure, ValidationFailure) as e:
            logger.warning("Auxiliary analysis %s unavailable: %s", name, e)
            return None

    async def _call_with_retry(
        self, name: str, call: Callable[[], Awaitable[Any]]
    ) -> Any:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.config.extraction_max_attempts),
            wait=wait_exponential(
                multiplier=self.config.backoff_initial_seconds,
                max=self.config.backoff_max_seconds,
            ),
            retry=retry_if_exception_type(ExtractionFailure),
            before_sleep=_log_retry,
            reraise=True,
        )
        result = None
        async for attempt in retrying:
            with attempt:
                result = await self._call_once(name, call)
        return result

    async def _call_once(self, name: str, call: Callable[[], Awaitable[Any]]) -> Any:
        timeout = self.config.extraction_timeout_seconds
        try:
            return await asyncio.wait_for(call(), timeout=timeout)
        except asyncio.TimeoutError:
            raise ExtractionFailure(f"{name} timed out after {timeout}s")
        except DialogueError:
            raise
        except Exception as e:
            raise ExtractionFailure(f"{name} failed: {e}") from e
