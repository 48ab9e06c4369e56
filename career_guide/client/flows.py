"""
client/flows.py — One Flow per form-to-endpoint pairing.

A Flow is pure configuration: where to POST, what to call the input field,
and what a complete response looks like. The controller logic is shared.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from career_guide.models import (
    CareerGuidance,
    CareerRecommendation,
    CvFile,
    CvSummary,
    InterviewQuestions,
)

INCOMPLETE_MESSAGE = "Received incomplete data from the server. Please try again or contact support."


@dataclass(frozen=True)
class Flow:
    name: str
    endpoint: str
    field_name: str | None = None          # None → the caller supplies the whole body
    input_label: str = "value"
    required_fields: tuple[str, ...] = ()  # Top-level keys that must be non-empty lists
    response_model: type[BaseModel] | None = None
    many: bool = False                     # Body is a JSON array of response_model
    incomplete_message: str = INCOMPLETE_MESSAGE

    def build_body(self, value: str) -> dict[str, Any]:
        if self.field_name is None:
            raise ValueError(f"Flow '{self.name}' takes a full request body, not a single field")
        return {self.field_name: value}

    def parse(self, payload: Any) -> Any:
        """Turn a checked payload into typed models for rendering."""
        if self.response_model is None:
            return payload
        if self.many:
            return [self.response_model.model_validate(item) for item in payload]
        return self.response_model.model_validate(payload)


CAREER_GUIDANCE = Flow(
    name="career_guidance",
    endpoint="/career_guidance",
    field_name="program",
    input_label="field of study",
    required_fields=("keySkills", "careerPaths", "certifications", "industryTrends"),
    response_model=CareerGuidance,
)

RECOMMENDATIONS = Flow(
    name="recommendations",
    endpoint="/get_recommendations",
    field_name="program",
    input_label="program",
    response_model=CareerRecommendation,
    many=True,
)

INTERVIEW_QUESTIONS = Flow(
    name="interview_questions",
    endpoint="/interview-questions",
    field_name="role",
    input_label="role",
    required_fields=("questions",),
    response_model=InterviewQuestions,
)

GENERATE_CV = Flow(
    name="generate_cv",
    endpoint="/generate-cv",
    response_model=CvFile,
)

GENERATE_SUMMARY = Flow(
    name="generate_summary",
    endpoint="/generate-summary",
    response_model=CvSummary,
    incomplete_message="No summary was generated. Please try again.",
)
