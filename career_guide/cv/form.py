"""
cv/form.py — CV builder form state.

Three repeatable sections (education, experience, skills), each holding at
least one entry. validate() mirrors the form's inline error messages and
keys them by field path, e.g. "education[0].institution", so the UI can show
each message next to its input.
"""
from __future__ import annotations

import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from career_guide.models import EducationItem, ExperienceItem

EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")

Section = Literal["education", "experience", "skills"]

# (field, message) pairs checked for every entry of a repeatable section
_REQUIRED_ITEM_FIELDS: dict[str, tuple[tuple[str, str], ...]] = {
    "education": (
        ("institution", "Institution is required"),
        ("degree", "Degree is required"),
        ("year", "Year is required"),
    ),
    "experience": (
        ("company", "Company is required"),
        ("position", "Position is required"),
        ("start_date", "Start date is required"),
    ),
}

_ITEM_TYPES = {"education": EducationItem, "experience": ExperienceItem}


class CvForm(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    name: str = ""
    email: str = ""
    phone: str = ""
    summary: str = ""
    education: list[EducationItem] = Field(default_factory=lambda: [EducationItem()])
    experience: list[ExperienceItem] = Field(default_factory=lambda: [ExperienceItem()])
    skills: list[str] = Field(default_factory=lambda: [""])

    # ── Array bookkeeping ─────────────────────────────────────────────────────

    def add_item(self, section: Section) -> None:
        items = getattr(self, section)
        items.append("" if section == "skills" else _ITEM_TYPES[section]())

    def remove_item(self, section: Section, index: int) -> bool:
        """Remove one entry. Refused (returns False) when it is the last one."""
        items = getattr(self, section)
        if len(items) <= 1 or not 0 <= index < len(items):
            return False
        del items[index]
        return True

    def update_item(self, section: Section, index: int, field: str | None, value: str) -> None:
        """Set one entry's field; skills entries are plain strings, so field is ignored."""
        items = getattr(self, section)
        if section == "skills":
            items[index] = value
            return
        item = items[index]
        fields = type(item).model_fields
        if field == "uid" or field not in fields:
            # Accept the camelCase names the form posts as well
            field = next(
                (name for name, info in fields.items() if info.alias is not None and info.alias == field),
                None,
            )
            if field is None:
                raise KeyError(f"Unknown {section} field")
        items[index] = item.model_copy(update={field: value})

    # ── Validation ────────────────────────────────────────────────────────────

    def validate_fields(self) -> dict[str, str]:
        """Return {field_path: message} for every problem; empty dict means valid."""
        errors: dict[str, str] = {}

        if not self.name.strip():
            errors["name"] = "Name is required"
        if not self.email.strip():
            errors["email"] = "Email is required"
        elif not EMAIL_PATTERN.match(self.email):
            errors["email"] = "Invalid email format"
        if not self.phone.strip():
            errors["phone"] = "Phone number is required"
        if not self.summary.strip():
            errors["summary"] = "Summary is required"

        for section, required in _REQUIRED_ITEM_FIELDS.items():
            for index, item in enumerate(getattr(self, section)):
                for field, message in required:
                    if not getattr(item, field).strip():
                        alias = type(item).model_fields[field].alias or field
                        errors[f"{section}[{index}].{alias}"] = message

        if any(not skill.strip() for skill in self.skills):
            errors["skills"] = "All skills must be filled"

        return errors

    def has_summary_material(self) -> bool:
        """True if there is enough filled in for the backend to write a summary."""
        has_education = any(
            e.institution.strip() and e.degree.strip() and e.year.strip() for e in self.education
        )
        has_experience = any(
            e.company.strip() and e.position.strip() and e.start_date.strip() for e in self.experience
        )
        has_skills = any(skill.strip() for skill in self.skills)
        return has_education or has_experience or has_skills

    def to_wire(self) -> dict[str, Any]:
        """The JSON body both CV endpoints expect (camelCase keys)."""
        return self.model_dump(by_alias=True)
