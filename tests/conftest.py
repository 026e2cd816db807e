"""Shared rule configurations for the screener tests."""

from __future__ import annotations

import copy

import pytest

from screener.rules.loader import load_model
from screener.rules.model import RuleModel

# Lifeline: monthly income <= threshold[household size]
LIFELINE_CONFIG: dict = {
    "programs": [
        {
            "id": "lifeline",
            "name": "Lifeline",
            "criteria_logic": "AND",
            "criteria_ids": ["lifeline_income"],
            "estimated_savings": "$9.25/month",
            "application_link": "https://example.org/lifeline",
        },
    ],
    "criteria": [
        {
            "id": "lifeline_income",
            "comparison": "<=",
            "threshold_by_household_size": {"1": 1500, "2": 2000},
        },
    ],
    "questions": [
        {
            "question": "What is your household size?",
            "type": "number",
            "variable": "household_size",
            "criteria_impact": [],
        },
        {
            "question": "What is your monthly income?",
            "type": "number",
            "criteria_impact": [{"criteria_id": "lifeline_income", "program_id": "lifeline"}],
        },
    ],
}

# Three programs; "How old are you?" touches two of them.
SCREENER_CONFIG: dict = {
    "programs": [
        {
            "id": "lifeline",
            "name": "Lifeline",
            "criteria_logic": "AND",
            "criteria_ids": ["lifeline_income"],
        },
        {
            "id": "veterans",
            "name": "Veterans Benefit",
            "criteria_logic": "AND",
            "criteria_ids": ["is_veteran", "adult"],
            "estimated_savings": "$150/month",
        },
        {
            "id": "seniors",
            "name": "Senior Support",
            "criteria_logic": "OR",
            "criteria_ids": ["senior_age", {"type": "any_of", "criteria_ids": ["disabled"]}],
        },
    ],
    "criteria": [
        {
            "id": "lifeline_income",
            "comparison": "<=",
            "threshold_by_household_size": {"1": 1500, "2": 2000},
        },
        {"id": "is_veteran", "options": ["Yes"]},
        {"id": "adult", "comparison": ">=", "threshold": 18},
        {"id": "senior_age", "comparison": ">=", "threshold": 65},
        {"id": "disabled", "options": ["Yes"]},
    ],
    "questions": [
        {
            "question": "Are you a veteran?",
            "type": "boolean",
            "criteria_impact": [{"criteria_id": "is_veteran", "program_id": "veterans"}],
        },
        {
            "question": "What is your household size?",
            "type": "number",
            "variable": "household_size",
            "criteria_impact": [{"criteria_id": "lifeline_income", "program_id": "lifeline"}],
        },
        {
            "question": "What is your monthly income?",
            "type": "number",
            "criteria_impact": [{"criteria_id": "lifeline_income", "program_id": "lifeline"}],
        },
        {
            "question": "How old are you?",
            "type": "number",
            "criteria_impact": [
                {"criteria_id": "senior_age", "program_id": "seniors"},
                {"criteria_id": "adult", "program_id": "veterans"},
            ],
        },
        {
            "question": "Do you have a disability?",
            "type": "boolean",
            "criteria_impact": [{"criteria_id": "disabled", "program_id": "seniors"}],
        },
    ],
}


@pytest.fixture()
def lifeline_config() -> dict:
    return copy.deepcopy(LIFELINE_CONFIG)


@pytest.fixture()
def lifeline_model(lifeline_config) -> RuleModel:
    return load_model(lifeline_config)


@pytest.fixture()
def screener_config() -> dict:
    return copy.deepcopy(SCREENER_CONFIG)


@pytest.fixture()
def screener_model(screener_config) -> RuleModel:
    return load_model(screener_config)
