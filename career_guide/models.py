"""
models.py — Backend request/response shapes defined as Pydantic models.

Keeping models in one file means:
- Every flow validates its response against the same contract the UI renders
- camelCase wire names live here (aliases) and nowhere else
- Validation happens at the boundary, so the UI never sees a half-filled payload
"""
from __future__ import annotations
import uuid
from typing import Literal
from pydantic import BaseModel, ConfigDict, Field


class WireModel(BaseModel):
    """Accepts both the backend's camelCase keys and Python field names."""
    model_config = ConfigDict(populate_by_name=True)


# ── Career guidance ───────────────────────────────────────────────────────────

class CareerGuidance(WireModel):
    key_skills: list[str] = Field(alias="keySkills", min_length=1)
    career_paths: list[str] = Field(alias="careerPaths", min_length=1)
    certifications: list[str] = Field(min_length=1)
    industry_trends: list[str] = Field(alias="industryTrends", min_length=1)


# ── Career recommendations ────────────────────────────────────────────────────

class CareerRecommendation(WireModel):
    """One card on the recommendations page."""
    title: str
    description: str = ""
    skills: list[str] = Field(default_factory=list)
    education: str = ""
    outlook: str = ""
    salary: str = ""


# ── Interview questions ───────────────────────────────────────────────────────

class InterviewQuestion(WireModel):
    question: str = Field(min_length=1)
    tips: list[str] = Field(default_factory=list)


class InterviewQuestions(WireModel):
    questions: list[InterviewQuestion] = Field(min_length=1)


# ── CV builder ────────────────────────────────────────────────────────────────

class FormItem(WireModel):
    """One repeatable CV entry; uid identifies it across edits and is never sent."""
    uid: str = Field(default_factory=lambda: uuid.uuid4().hex, exclude=True)


class EducationItem(FormItem):
    institution: str = ""
    degree: str = ""
    year: str = ""
    description: str = ""


class ExperienceItem(FormItem):
    company: str = ""
    position: str = ""
    start_date: str = Field(default="", alias="startDate")
    end_date: str = Field(default="", alias="endDate")
    description: str = ""


class CvFile(WireModel):
    """What /generate-cv returns; downloadUrl is relative to the backend."""
    filename: str = Field(min_length=1)
    download_url: str = Field(alias="downloadUrl", min_length=1)


class CvSummary(WireModel):
    success: Literal[True]
    summary: str = Field(min_length=1)
