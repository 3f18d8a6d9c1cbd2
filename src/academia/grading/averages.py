"""Core competency averaging."""

from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from academia.store.models import CORE_COMPETENCIES, EvaluationType

if TYPE_CHECKING:
    from academia.store.models import Grade

# Fixed denominator: a missing competency grade counts as zero
CORE_COMPETENCY_COUNT = 6
PASSING_AVERAGE = Decimal(51)
AVERAGE_QUANTUM = Decimal("0.01")


def core_competency_average(grades: Iterable[Grade]) -> Decimal:
    """Average of the six core competencies, rounded to 2 decimal places.

    Only the latest grade of each core competency is used. Other evaluation
    types (quizzes, exams, ...) are ignored.
    """
    latest: dict[EvaluationType, Grade] = {}
    for grade in grades:
        try:
            kind = EvaluationType(grade.evaluation_type)
        except ValueError:
            continue
        if kind not in CORE_COMPETENCIES:
            continue
        current = latest.get(kind)
        if current is None or grade.grade_date >= current.grade_date:
            latest[kind] = grade

    total = sum((Decimal(grade.grade_value) for grade in latest.values()), Decimal(0))
    return (total / CORE_COMPETENCY_COUNT).quantize(AVERAGE_QUANTUM, rounding=ROUND_HALF_UP)
