"""Factor recompute collaborator backed by an LLM completion function."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from typing import Any, Dict

from pd_sections.config import llm_settings
from pd_sections.errors import RecomputeError
from pd_sections.grading import FACTOR_POINTS, GRADE_BANDS, RecomputeResult, score_factors
from pd_sections.section_patterns import FACTOR_NAMES, FACTOR_SUB_NAMES

logger = logging.getLogger(__name__)

# lowest total that lands safely inside each grade band
GRADE_TARGET_MINIMUMS: Dict[str, int] = {
    "GS-05": 855,
    "GS-07": 1355,
    "GS-09": 1855,
    "GS-11": 2355,
    "GS-12": 2755,
    "GS-13": 3155,
    "GS-14": 3605,
    "GS-15": 4055,
}


def init_llm(api_key: str | None = None, model: str | None = None) -> Callable[[str], str]:
    """Return a completion function configured with an API key."""
    settings = llm_settings()
    key = api_key or settings["api_key"]
    if not key:
        raise ValueError("OPENAI_API_KEY not found in .env file or environment.")
    try:
        import litellm
    except Exception as exc:  # pragma: no cover
        raise ImportError("litellm is required for init_llm") from exc
    model_name = model or settings["model"]

    def completion(prompt: str) -> str:
        response = litellm.completion(
            model=model_name,
            messages=[{"role": "user", "content": prompt}],
            temperature=0.0,
            max_tokens=1500,
            api_key=key,
        )
        return response.choices[0].message.content or ""

    return completion


def _grade_window(grade: str) -> tuple[int, int | None]:
    high = next((b[1] for b in GRADE_BANDS if b[2] == grade), None)
    return GRADE_TARGET_MINIMUMS.get(grade, 0), high


def _factor_name(factor: str) -> str:
    return FACTOR_NAMES.get(factor) or FACTOR_SUB_NAMES.get(factor[1:], "")


def _valid_levels_lines(factors: Mapping[str, str]) -> list[str]:
    """Level choices for factors 1..9, plus 4A/4B when their content is sent."""
    sent = {key.replace("Factor", "").strip().upper() for key in factors}
    return [
        f"Factor {n} ({_factor_name(n)}): "
        + ", ".join(f"{n}-{level}" for level in range(1, len(points) + 1))
        for n, points in FACTOR_POINTS.items()
        if n.isdigit() or n in sent
    ]


def _factor_payload(factors: Mapping[str, str]) -> str:
    entries = {
        key.replace("Factor", "").strip(): " ".join(value.replace('"', "'").split())
        for key, value in factors.items()
        if value and value.strip()
    }
    return json.dumps(entries, ensure_ascii=False)


def build_recompute_prompt(
    factors: Mapping[str, str],
    *,
    supervisory_level: str = "Non-Supervisory",
    expected_grade: str | None = None,
) -> str:
    """Prompt asking for one valid level and a rationale per factor."""
    lines = [
        "You are an OPM HR expert specializing in federal position classification.",
        f"Supervisory Level: {supervisory_level}",
    ]
    if expected_grade:
        low, high = _grade_window(expected_grade)
        bound = f"between {low} and {high}" if high is not None else f"at least {low}"
        lines.append(
            f"CRITICAL: Factor levels MUST total {bound} points "
            f"to achieve {expected_grade} classification."
        )
    lines += [
        "Review each factor content and assign the correct level based on OPM standards.",
        "",
        "CRITICAL: Each factor has ONLY these valid levels:",
        *_valid_levels_lines(factors),
        "",
        "DO NOT use any other level formats. The factor number must match exactly.",
        "",
        "Return JSON only in this exact format:",
        '{"Factor 1": {"level":"1-X","rationale":"brief explanation"}, '
        '"Factor 2": {"level":"2-X","rationale":"brief explanation"}}',
        "Only include factors that have content provided.",
        "",
        "FACTOR CONTENT:",
        _factor_payload(factors),
    ]
    return "\n".join(lines)


def extract_json(text: str) -> str:
    """Return the span from the first ``{`` to the last ``}`` of ``text``."""
    start, end = text.find("{"), text.rfind("}")
    if start == -1 or end <= start:
        raise RecomputeError("could not find a JSON object in the AI response")
    return text[start : end + 1]


def parse_levels(text: str) -> Dict[str, Any]:
    try:
        data = json.loads(extract_json(text))
    except json.JSONDecodeError as exc:
        raise RecomputeError(f"failed to parse AI response as JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise RecomputeError("AI response JSON is not an object")
    return data


class AIRecompute:
    """Callable recompute collaborator: factor contents in, scored result out."""

    def __init__(
        self,
        completion_fn: Callable[[str], str],
        *,
        supervisory_level: str = "Non-Supervisory",
        expected_grade: str | None = None,
    ) -> None:
        self._completion_fn = completion_fn
        self.supervisory_level = supervisory_level
        self.expected_grade = expected_grade

    def __call__(self, factors: Mapping[str, str]) -> RecomputeResult:
        if not any(v and v.strip() for v in factors.values()):
            raise RecomputeError("No factor content provided for evaluation")
        prompt = build_recompute_prompt(
            factors,
            supervisory_level=self.supervisory_level,
            expected_grade=self.expected_grade,
        )
        response = self._completion_fn(prompt)
        if not response or not response.strip():
            raise RecomputeError("Empty response from AI completion")
        levels = {
            key if key.startswith("Factor") else f"Factor {key}": value
            for key, value in parse_levels(response).items()
        }
        result = score_factors(levels)
        if not result.factors:
            raise RecomputeError("AI response contained no usable factor levels")
        if self.expected_grade and result.final_grade != self.expected_grade:
            logger.warning(
                "calculated grade %s differs from expected %s",
                result.final_grade,
                self.expected_grade,
            )
        return result
