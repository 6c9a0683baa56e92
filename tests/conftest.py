from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Mapping

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from pd_sections.grading import RecomputeResult, score_factors  # noqa: E402

SAMPLE_PD = (
    "**HEADER**\n"
    "Job Series: GS-0301\n"
    "\n"
    "**Factor 1 \u2013 Knowledge Required Level 1-7, 1250 Points**\n"
    "Rationale text.\n"
    "\n"
    "Total Points: 1250\n"
    "Final Grade: GS-9\n"
    "Grade Range: 9-9"
)

FULL_PD = (
    "**HEADER**\n"
    "Job Series: GS-0343Position Title: Management AnalystAgency: Department of Energy\n"
    "\n"
    "**INTRODUCTION**\n"
    "The incumbent serves as a management analyst\n"
    "responsible for program evaluation.\n"
    "\n"
    "**MAJOR DUTIES**\n"
    "1. Conducts studies of program operations. 2. Prepares reports for management.\n"
    "\n"
    "**Factor 1 - Knowledge Required by the Position Level 1-7, 1250 Points**\n"
    "Requires knowledge of analytical methods.\n"
    "\n"
    "**Factor 2 - Supervisory Controls Level 2-4, 450 Points**\n"
    "Supervisor sets overall objectives.\n"
    "\n"
    "Total Points: 1700\n"
    "Final Grade: GS-9\n"
    "Grade Range: 1601-2100\n"
    "\n"
    "**CONDITIONS OF EMPLOYMENT**\n"
    "Must pass a background investigation.\n"
)


@pytest.fixture
def sample_pd() -> str:
    return SAMPLE_PD


@pytest.fixture
def full_pd() -> str:
    return FULL_PD


@pytest.fixture
def fixed_recompute() -> Callable[[Mapping[str, str]], RecomputeResult]:
    """Recompute collaborator that scores every supplied factor at level N-3."""

    def recompute(factors: Mapping[str, str]) -> RecomputeResult:
        levels = {
            key: {"level": f"{key.split()[-1]}-3", "rationale": "stub"} for key in factors
        }
        return score_factors(levels)

    return recompute
