"""
ui/streamlit_app.py — Career Guide frontend.

All backend calls go through the controllers in career_guide.client and
career_guide.cv; this file only renders RequestState and ErrorInfo and never
looks at raw HTTP errors.

Layout:
  Sidebar : tool picker, backend configuration status
  Main    : one page per tool (guidance, recommendations, interview prep, CV)
"""
import asyncio

import streamlit as st

from career_guide.client.controller import GuidanceRequestController
from career_guide.client.flows import CAREER_GUIDANCE, INTERVIEW_QUESTIONS, RECOMMENDATIONS, Flow
from career_guide.client.state import ErrorKind, RequestState
from career_guide.config import get_settings
from career_guide.cv.form import CvForm
from career_guide.cv.service import CvController

settings = get_settings()

st.set_page_config(
    page_title="Career Guide",
    page_icon="🧭",
    layout="wide",
    initial_sidebar_state="expanded",
)

PAGES = {
    "Career Guidance": CAREER_GUIDANCE,
    "Career Recommendations": RECOMMENDATIONS,
    "Interview Questions": INTERVIEW_QUESTIONS,
    "CV Builder": None,
}

# ── Session state initialisation ───────────────────────────────────────────────
# One controller per form, kept for the whole browser session.
if "controllers" not in st.session_state:
    st.session_state.controllers = {
        flow.name: GuidanceRequestController(flow, settings=settings)
        for flow in PAGES.values() if flow is not None
    }
if "cv_form" not in st.session_state:
    st.session_state.cv_form = CvForm()
if "cv_controller" not in st.session_state:
    st.session_state.cv_controller = CvController(settings=settings)


# ── Helpers ────────────────────────────────────────────────────────────────────

def run(coro) -> RequestState:
    """Streamlit scripts are synchronous; drive each request on a fresh loop."""
    return asyncio.run(coro)


def show_error(state: RequestState, retry_key: str | None = None) -> bool:
    """Render a Failed state. Returns True when the user clicked Retry."""
    if not state.is_failed:
        return False
    error = state.error
    if error.kind is ErrorKind.VALIDATION:
        st.warning(error.message)
    else:
        st.error(error.message)
    if error.retryable and retry_key:
        return st.button("🔄 Try again", key=retry_key)
    return False


def render_bullets(title: str, items: list[str]) -> None:
    st.subheader(title)
    for item in items:
        st.markdown(f"- {item}")


def render_guidance(payload) -> None:
    guidance = CAREER_GUIDANCE.parse(payload)
    col1, col2 = st.columns(2)
    with col1:
        render_bullets("🎓 Key Skills", guidance.key_skills)
        render_bullets("🏅 Certifications", guidance.certifications)
    with col2:
        render_bullets("💼 Career Paths", guidance.career_paths)
        render_bullets("📈 Industry Trends", guidance.industry_trends)


def render_recommendations(payload) -> None:
    for rec in RECOMMENDATIONS.parse(payload):
        with st.container(border=True):
            st.subheader(rec.title)
            st.write(rec.description)
            if rec.skills:
                st.markdown("**Skills:** " + ", ".join(rec.skills))
            st.caption(f"🎓 {rec.education} · 📈 {rec.outlook} · 💰 {rec.salary}")


def render_questions(payload) -> None:
    questions = INTERVIEW_QUESTIONS.parse(payload).questions
    for index, item in enumerate(questions):
        # First three expanded by default
        with st.expander(f"{index + 1}. {item.question}", expanded=index < 3):
            st.caption("When answering this question, consider:")
            for tip in item.tips:
                st.markdown(f"- {tip}")


RENDERERS = {
    CAREER_GUIDANCE.name: render_guidance,
    RECOMMENDATIONS.name: render_recommendations,
    INTERVIEW_QUESTIONS.name: render_questions,
}

PLACEHOLDERS = {
    CAREER_GUIDANCE.name: "e.g. Computer Science, Nursing, Economics",
    RECOMMENDATIONS.name: "e.g. Computer Science, Business Administration",
    INTERVIEW_QUESTIONS.name: "e.g. Data Analyst, Product Manager",
}


def guidance_page(title: str, flow: Flow) -> None:
    controller: GuidanceRequestController = st.session_state.controllers[flow.name]

    st.title(title)
    input_key = f"{flow.name}_input"
    if input_key not in st.session_state:
        st.session_state[input_key] = controller.last_input or ""
    # Outside st.form so on_change fires on every edit of the field.
    value = st.text_input(
        f"Enter your {flow.input_label}",
        key=input_key,
        placeholder=PLACEHOLDERS[flow.name],
        max_chars=settings.input_max_length,
        on_change=controller.clear_error,
    )
    submitted = st.button("Search", key=f"{flow.name}_search", use_container_width=True)

    if submitted:
        with st.spinner("Fetching results..."):
            run(controller.submit(value))

    if show_error(controller.state, retry_key=f"{flow.name}_retry"):
        with st.spinner("Retrying..."):
            run(controller.retry())
        st.rerun()

    if controller.state.is_succeeded:
        if controller.last_input:
            st.caption(f"Results for **{controller.last_input}**")
        RENDERERS[flow.name](controller.state.payload)


# ── CV builder ─────────────────────────────────────────────────────────────────

def field_error(errors: dict[str, str], path: str) -> None:
    if path in errors:
        st.caption(f":red[{errors[path]}]")


def cv_page() -> None:
    form: CvForm = st.session_state.cv_form
    controller: CvController = st.session_state.cv_controller
    gen_state = controller.generator.state
    errors = gen_state.error.field_errors if gen_state.is_failed else {}

    st.title("CV Builder")
    form_tab, preview_tab = st.tabs(["📝 Form", "👀 Preview"])

    with form_tab:
        st.subheader("Personal details")
        form.name = st.text_input("Full name", value=form.name)
        field_error(errors, "name")
        form.email = st.text_input("Email", value=form.email)
        field_error(errors, "email")
        form.phone = st.text_input("Phone", value=form.phone)
        field_error(errors, "phone")

        form.summary = st.text_area("Professional summary", value=form.summary)
        field_error(errors, "summary")
        if st.button("✨ Generate summary"):
            with st.spinner("Writing summary..."):
                run(controller.generate_summary(form))
            st.rerun()
        show_error(controller.summariser.state)

        st.subheader("Education")
        for i, edu in enumerate(form.education):
            with st.container(border=True):
                for field, label in (("institution", "Institution"), ("degree", "Degree"),
                                     ("year", "Year"), ("description", "Description")):
                    value = st.text_input(label, value=getattr(edu, field), key=f"edu_{edu.uid}_{field}")
                    form.update_item("education", i, field, value)
                    field_error(errors, f"education[{i}].{field}")
                if st.button("🗑️ Remove", key=f"edu_rm_{edu.uid}") and form.remove_item("education", i):
                    st.rerun()
        if st.button("➕ Add education"):
            form.add_item("education")
            st.rerun()

        st.subheader("Experience")
        for i, exp in enumerate(form.experience):
            with st.container(border=True):
                for field, alias, label in (("company", "company", "Company"),
                                            ("position", "position", "Position"),
                                            ("start_date", "startDate", "Start date"),
                                            ("end_date", "endDate", "End date"),
                                            ("description", "description", "Description")):
                    value = st.text_input(label, value=getattr(exp, field), key=f"exp_{exp.uid}_{field}")
                    form.update_item("experience", i, field, value)
                    field_error(errors, f"experience[{i}].{alias}")
                if st.button("🗑️ Remove", key=f"exp_rm_{exp.uid}") and form.remove_item("experience", i):
                    st.rerun()
        if st.button("➕ Add experience"):
            form.add_item("experience")
            st.rerun()

        st.subheader("Skills")
        for i, skill in enumerate(form.skills):
            form.update_item("skills", i, None, st.text_input(f"Skill {i + 1}", value=skill, key=f"skill_{i}"))
        field_error(errors, "skills")
        col1, col2 = st.columns(2)
        with col1:
            if st.button("➕ Add skill"):
                form.add_item("skills")
                st.rerun()
        with col2:
            if st.button("🗑️ Remove last skill") and form.remove_item("skills", len(form.skills) - 1):
                st.rerun()

        if st.button("📄 Generate CV", type="primary", use_container_width=True):
            with st.spinner("Generating CV..."):
                run(controller.generate_cv(form))
            st.rerun()
        if show_error(gen_state, retry_key="cv_retry"):
            with st.spinner("Retrying..."):
                run(controller.generate_cv(form))
            st.rerun()

    with preview_tab:
        st.header(form.name or "Your name")
        st.caption(" • ".join(part for part in (form.email, form.phone) if part))
        st.write(form.summary)
        st.subheader("EDUCATION")
        for edu in form.education:
            st.markdown(f"**{edu.degree}**, {edu.institution} ({edu.year})")
            if edu.description:
                st.write(edu.description)
        st.subheader("EXPERIENCE")
        for exp in form.experience:
            st.markdown(f"**{exp.position}**, {exp.company} ({exp.start_date} – {exp.end_date or 'Present'})")
            if exp.description:
                st.write(exp.description)
        st.subheader("SKILLS")
        st.write(", ".join(skill for skill in form.skills if skill.strip()))

        generated = controller.cv_generated
        if generated is not None:
            st.success(f"✅ {generated.filename} is ready")
            st.link_button("⬇️ Download CV", generated.download_url)


# ── Sidebar ────────────────────────────────────────────────────────────────────

with st.sidebar:
    st.title("🧭 Career Guide")
    page = st.radio("Tool", list(PAGES.keys()))
    st.divider()
    st.subheader("Backend")
    if settings.api_base_url:
        st.markdown(f"🟢 `{settings.api_base_url}`")
    else:
        st.error("⚠️ API_BASE_URL is not set. Requests will fail until it is configured.")


# ── Main area ──────────────────────────────────────────────────────────────────

flow = PAGES[page]
if flow is None:
    cv_page()
else:
    guidance_page(page, flow)
