"""
cv/service.py — Generate a CV file or an AI-written summary from a CvForm.

Both calls go through RequestController, so they get the same timeout,
cancellation and error classification as the guidance flows. Local form
checks run first and never touch the network.
"""
from __future__ import annotations

from dataclasses import dataclass

import httpx

from career_guide.client.controller import RequestController
from career_guide.client.flows import GENERATE_CV, GENERATE_SUMMARY
from career_guide.client.state import ErrorInfo, ErrorKind, RequestState
from career_guide.config import Settings, get_settings
from career_guide.cv.form import CvForm
from career_guide.models import CvFile, CvSummary

FORM_INVALID_MESSAGE = "Please fix the highlighted fields before generating your CV."
SUMMARY_MATERIAL_MESSAGE = "Please fill in some education, experience, or skills information first"


@dataclass(frozen=True)
class CvGenerated:
    filename: str
    download_url: str   # Absolute, ready to open in a browser


class CvController:
    """Owns the two CV requests; each has its own independent lifecycle."""

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.generator = RequestController(GENERATE_CV, settings=self.settings, transport=transport)
        self.summariser = RequestController(GENERATE_SUMMARY, settings=self.settings, transport=transport)

    @property
    def cv_generated(self) -> CvGenerated | None:
        state = self.generator.state
        if not state.is_succeeded:
            return None
        cv_file = CvFile.model_validate(state.payload)
        return CvGenerated(
            filename=cv_file.filename,
            download_url=self.settings.endpoint_url(cv_file.download_url),
        )

    async def generate_cv(self, form: CvForm) -> RequestState:
        field_errors = form.validate_fields()
        if field_errors:
            return self.generator.fail(ErrorInfo(
                kind=ErrorKind.VALIDATION,
                message=FORM_INVALID_MESSAGE,
                retryable=False,
                field_errors=field_errors,
            ))
        return await self.generator.dispatch(form.to_wire())

    async def generate_summary(self, form: CvForm) -> RequestState:
        """On success the generated summary is written back into the form."""
        if not form.has_summary_material():
            return self.summariser.fail(ErrorInfo(
                kind=ErrorKind.VALIDATION,
                message=SUMMARY_MATERIAL_MESSAGE,
                retryable=False,
                field_errors={"summary": SUMMARY_MATERIAL_MESSAGE},
            ))

        state = await self.summariser.dispatch(form.to_wire())
        if state.is_succeeded:
            form.summary = CvSummary.model_validate(state.payload).summary
        return state
