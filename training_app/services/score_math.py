from decimal import Decimal, ROUND_HALF_UP

from django.db.models import ExpressionWrapper, F, FloatField, Value
from django.db.models.functions import Coalesce

CENT = Decimal('0.01')

FALLBACK_MIN_SCORE = 60.0
FALLBACK_MAX_SCORE = 95.0
DEFAULT_TEACHER_SCORE = 75.0

# Comment-length bands for the fallback base score: (upper bound inclusive, base)
_LENGTH_BASE = (
    (49,  50.0),
    (200, 75.0),
    (500, 70.0),
)
_PADDED_BASE = 65.0

RATING_SCALE = 20
UNDERSTANDING_WEIGHT = Decimal('0.3')
DIFFICULTY_WEIGHT = Decimal('0.1')
SATISFACTION_WEIGHT = Decimal('0.1')
CONTENT_WEIGHT = Decimal('0.5')


def _d(x) -> Decimal:
    return Decimal(str(x))


def _round2(x: float | Decimal) -> float:
    return float(_d(x).quantize(CENT, rounding=ROUND_HALF_UP))


def round_or_none(x):
    return None if x is None else _round2(x)


def weighted_score(self_score, teacher_score, ratio) -> float | None:
    """
    Blend a self score and a teacher score.

    Returns ``self*(1-ratio) + teacher*ratio`` rounded to 2dp, or ``None``
    while the record has no teacher score. Inputs are assumed to be
    validated already (scores 0..100, ratio 0..1).
    """
    if teacher_score is None or self_score is None:
        return None
    ratio = _d(ratio)
    blended = _d(self_score) * (1 - ratio) + _d(teacher_score) * ratio
    return _round2(blended)


def effective_score(self_score, teacher_score, ratio) -> float | None:
    """Weighted score once graded, the bare self score before that."""
    weighted = weighted_score(self_score, teacher_score, ratio)
    if weighted is not None:
        return weighted
    return round_or_none(self_score)


def weighted_score_expr(prefix: str = ""):
    """
    ORM expression of the weighted score for aggregation.

    ``prefix`` points at the evaluation relation, e.g. ``"evaluations__"``.
    Evaluates to NULL for ungraded rows.
    """
    self_score = F(f"{prefix}self_score")
    teacher_score = F(f"{prefix}teacher_score")
    ratio = F(f"{prefix}score_ratio")
    return ExpressionWrapper(
        self_score * (Value(1.0) - ratio) + teacher_score * ratio,
        output_field=FloatField(),
    )


def effective_score_expr(prefix: str = ""):
    return Coalesce(weighted_score_expr(prefix), F(f"{prefix}self_score"), output_field=FloatField())


def _length_base(comment: str) -> float:
    length = len(comment or "")
    for upper, base in _LENGTH_BASE:
        if length <= upper:
            return base
    return _PADDED_BASE


def fallback_self_score(comment: str, understanding: int, difficulty: int, satisfaction: int) -> float:
    """
    Deterministic self-evaluation score used when the scoring oracle
    cannot be reached.

    score = base(comment length) * 0.5
          + understanding * 20 * 0.3
          + difficulty    * 20 * 0.1
          + satisfaction  * 20 * 0.1

    The result is clamped to [60, 95].
    """
    total = (
        _d(_length_base(comment)) * CONTENT_WEIGHT
        + _d(understanding) * RATING_SCALE * UNDERSTANDING_WEIGHT
        + _d(difficulty) * RATING_SCALE * DIFFICULTY_WEIGHT
        + _d(satisfaction) * RATING_SCALE * SATISFACTION_WEIGHT
    )
    return _round2(clamp(total, FALLBACK_MIN_SCORE, FALLBACK_MAX_SCORE))


def clamp(value, low, high):
    return max(_d(low), min(_d(high), _d(value)))


def percentage(part, whole) -> float:
    if not whole:
        return 0.0
    return _round2(_d(part) * 100 / _d(whole))


def trend_of(scores) -> str:
    """up / down / stable from the last two scores in chronological order."""
    if len(scores) < 2:
        return "stable"
    previous, latest = scores[-2], scores[-1]
    if latest > previous:
        return "up"
    if latest < previous:
        return "down"
    return "stable"


SCORE_BUCKETS = (
    ("0-59",   0,  60),
    ("60-69",  60, 70),
    ("70-79",  70, 80),
    ("80-89",  80, 90),
    ("90-100", 90, None),
)
PASS_SCORE = 60
EXCELLENT_SCORE = 85


def score_bucket(score) -> str:
    for label, low, high in SCORE_BUCKETS:
        if score >= low and (high is None or score < high):
            return label
    return SCORE_BUCKETS[0][0]


def score_distribution(scores) -> list[dict]:
    counts = {label: 0 for label, _, _ in SCORE_BUCKETS}
    for score in scores:
        counts[score_bucket(score)] += 1
    return [{"range": label, "count": counts[label]} for label, _, _ in SCORE_BUCKETS]


def summarize(scores) -> dict:
    """average / highest / lowest over a list of scores, zeros when empty."""
    scores = [s for s in scores if s is not None]
    if not scores:
        return {"averageScore": 0.0, "highestScore": 0.0, "lowestScore": 0.0}
    return {
        "averageScore": _round2(sum(_d(s) for s in scores) / len(scores)),
        "highestScore": _round2(max(scores)),
        "lowestScore": _round2(min(scores)),
    }
