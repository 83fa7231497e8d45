"""Edge condition evaluation.

A pure predicate over (condition, answer), shared by the canvas preview and
the respondent runtime. It never raises: unknown comparison types, missing
answers and non-numeric operands all evaluate to False.
"""

import math
from collections.abc import Mapping
from typing import Any

from flowform.models.flow import Answer, ConditionType, EdgeCondition


def to_comparison_string(value: Any) -> str:
    """Render an answer or condition value the way the canvas displays it.

    Lists join with ``,`` and integral floats drop the trailing ``.0`` so that
    ``5.0`` and ``"5"`` compare equal.
    """
    if isinstance(value, (list, tuple)):
        return ",".join(to_comparison_string(item) for item in value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def to_number(value: Any) -> float:
    """Coerce to float; anything non-numeric (including blank text) is NaN."""
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    text = to_comparison_string(value).strip()
    if not text:
        return math.nan
    try:
        return float(text)
    except ValueError:
        return math.nan


def _equals(value: Any, answer: Answer) -> bool:
    value_str = to_comparison_string(value)
    if isinstance(answer, (list, tuple)):
        return value_str in [to_comparison_string(item) for item in answer]
    return to_comparison_string(answer) == value_str


def _evaluate_single(condition_type: Any, value: Any, answer: Answer) -> bool:
    if condition_type == ConditionType.equals:
        return _equals(value, answer)
    if condition_type == ConditionType.not_equals:
        return not _equals(value, answer)
    if condition_type == ConditionType.contains:
        return to_comparison_string(value).lower() in to_comparison_string(answer).lower()
    if condition_type == ConditionType.greater_than:
        # NaN on either side makes the comparison False
        return to_number(answer) > to_number(value)
    if condition_type == ConditionType.less_than:
        return to_number(answer) < to_number(value)
    return False


def evaluate_condition(condition: EdgeCondition | Mapping, answer: Answer | None) -> bool:
    """Return True if ``answer`` satisfies ``condition``.

    ``condition`` may be an EdgeCondition or its plain dict form. A list
    ``value`` is OR-ed: the condition holds if it holds for any element.
    """
    if answer is None:
        return False
    if isinstance(condition, Mapping):
        condition_type = condition.get("type")
        value = condition.get("value")
    else:
        condition_type = condition.type
        value = condition.value

    if isinstance(value, (list, tuple)):
        return any(_evaluate_single(condition_type, item, answer) for item in value)
    return _evaluate_single(condition_type, value, answer)
