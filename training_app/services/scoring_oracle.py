"""HTTP client for the chat-completion scoring oracle, with local fallbacks."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict

import httpx
from django.conf import settings

from training_app.services.score_math import (
    DEFAULT_TEACHER_SCORE,
    _round2,
    fallback_self_score,
)

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a professional training assessor. You judge how well a learner "
    "has mastered a course from written feedback."
)

SELF_EVALUATION_PROMPT = """Score the learner's mastery of the course "{course_name}" from 0 to 100 based on their self-evaluation.

Rubric:
- 90-100: deep understanding, can transfer the material, original insight
- 80-89: solid grasp of the key points, can apply them
- 70-79: understands the basics reasonably well
- 60-69: knows the outline but lacks depth
- below 60: did not grasp the core content

Self-evaluation:
{comment}

Self-reported indicators:
- understanding: {understanding}/5
- difficulty: {difficulty}/5
- satisfaction: {satisfaction}/5

Reply with a single integer between 0 and 100 and nothing else."""

TEACHER_PROMPT = """Score the learner's performance in the course "{course_name}" from 0 to 100 based on the teacher's remarks.

Rubric:
- 90-100: outstanding, actively engaged, complete mastery
- 80-89: good, diligent, solid mastery
- 70-79: satisfactory, grasped the basics
- 60-69: fair, needs more work
- below 60: poor, missed the core content

Teacher's remarks:
{comment}

Reply with a single integer between 0 and 100 and nothing else."""

# characters the oracle tends to wrap a bare number with
_SCORE_NOISE = "分."


class ScoringOracleError(RuntimeError):
    """The oracle could not produce a usable score."""


@dataclass
class ScoringOracleConfig:
    url: str
    model: str = "deepseek-chat"
    api_key: str | None = None
    timeout: float = 10.0

    @classmethod
    def from_settings(cls) -> "ScoringOracleConfig":
        conf = settings.SCORING_ORACLE
        return cls(
            url=conf["URL"],
            model=conf["MODEL"],
            api_key=conf.get("API_KEY") or None,
            timeout=float(conf.get("TIMEOUT", 10.0)),
        )


@dataclass
class ScoreResult:
    score: float
    source: str  # "oracle" or "fallback"


def parse_score(content: str) -> float:
    """Turn the oracle's reply into a score clamped to 0..100."""
    text = (content or "").strip().strip(_SCORE_NOISE).strip()
    try:
        value = float(text)
    except ValueError as exc:
        raise ScoringOracleError(f"unparseable score: {content!r}") from exc
    if not math.isfinite(value):
        raise ScoringOracleError(f"non-finite score: {content!r}")
    return _round2(min(100.0, max(0.0, value)))


class ScoringOracle:
    def __init__(
        self,
        config: ScoringOracleConfig,
        *,
        client: httpx.Client | None = None,
    ) -> None:
        self._config = config
        if client is None:
            self._client = httpx.Client(timeout=config.timeout)
            self._owns_client = True
        else:
            self._client = client
            self._owns_client = False

    def score(self, prompt: str) -> float:
        """Ask the oracle for a 0..100 score. Raises ScoringOracleError on any failure."""
        if not self._config.api_key:
            raise ScoringOracleError("no API key configured")

        payload: Dict[str, Any] = {
            "model": self._config.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "stream": False,
        }
        try:
            response = self._client.post(
                self._config.url,
                json=payload,
                headers=self._build_headers(),
                timeout=self._config.timeout,
            )
        except httpx.HTTPError as exc:
            raise ScoringOracleError(f"request failed: {exc}") from exc

        if response.status_code != httpx.codes.OK:
            raise ScoringOracleError(f"oracle returned HTTP {response.status_code}")

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise ScoringOracleError("malformed oracle response") from exc
        return parse_score(content)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def _build_headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._config.api_key}",
        }


def get_oracle() -> ScoringOracle:
    return ScoringOracle(ScoringOracleConfig.from_settings())


def score_self_evaluation(
    comment: str,
    understanding: int,
    difficulty: int,
    satisfaction: int,
    course_name: str,
    *,
    oracle: ScoringOracle | None = None,
) -> ScoreResult:
    """Oracle score for a self-evaluation; the length/rating heuristic when it fails."""
    prompt = SELF_EVALUATION_PROMPT.format(
        course_name=course_name,
        comment=comment,
        understanding=understanding,
        difficulty=difficulty,
        satisfaction=satisfaction,
    )
    owned = oracle is None
    oracle = oracle or get_oracle()
    try:
        return ScoreResult(oracle.score(prompt), "oracle")
    except ScoringOracleError as exc:
        logger.warning(f"Scoring oracle unavailable for self-evaluation, using fallback: {exc}")
        return ScoreResult(
            fallback_self_score(comment, understanding, difficulty, satisfaction),
            "fallback",
        )
    finally:
        if owned:
            oracle.close()


def score_teacher_comment(
    comment: str,
    course_name: str,
    *,
    oracle: ScoringOracle | None = None,
) -> ScoreResult:
    """Oracle score for a teacher's remarks; a fixed default when it fails."""
    prompt = TEACHER_PROMPT.format(course_name=course_name, comment=comment)
    owned = oracle is None
    oracle = oracle or get_oracle()
    try:
        return ScoreResult(oracle.score(prompt), "oracle")
    except ScoringOracleError as exc:
        logger.warning(f"Scoring oracle unavailable for grading, using default {DEFAULT_TEACHER_SCORE}: {exc}")
        return ScoreResult(DEFAULT_TEACHER_SCORE, "fallback")
    finally:
        if owned:
            oracle.close()
