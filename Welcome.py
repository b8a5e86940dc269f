from __future__ import annotations
from dataclasses import replace

import streamlit as st

from course_core.errors.handlers import error_boundary, report_result, safe_execute
from course_core.logging import setup_logging
from course_core.offline import get_data_service
from course_core.services.validation import validate_course_input, is_valid
from course_core.state.session import init_state, flash, show_flash, select_course, reset_forms
from course_core.ui.components import (
    header,
    announce_data_source,
    render_connection_sidebar,
    show_field_errors,
)

# ============================================================================
# PAGE CONFIGURATION
# ============================================================================
st.set_page_config(
    page_title="Student Course System - Courses",
    page_icon="🎓",
    layout="wide",
)

setup_logging(log_to_file=False)
init_state()

service = get_data_service()
# Leaving a page abandons whatever it was still loading
service.cancel_pending()
courses = service.courses

render_connection_sidebar(service)
header("Courses", "Browse, add and edit courses. Works offline with the last saved data.")
show_flash()

# ============================================================================
# LOAD
# ============================================================================
with st.spinner("Loading courses..."):
    result = safe_execute(
        lambda: service.submit(courses.read_all).result(),
        error_message="Failed to load courses",
    )
if result is None:
    st.stop()

announce_data_source(courses)
if result.error:
    st.caption(f"Last refresh failed: {result.error}")


# ============================================================================
# COURSE FORM
# ============================================================================
def _course_form(existing=None):
    title = "Edit course" if existing else "Add course"
    with st.form("course_form", clear_on_submit=existing is None):
        st.markdown(f"#### {title}")
        name = st.text_input("Name", value=existing.name if existing else "")
        description = st.text_area("Description", value=existing.description if existing else "")
        schedule = st.text_input("Schedule", value=existing.schedule if existing else "")
        professor = st.text_input("Professor", value=existing.professor if existing else "")
        image = st.file_uploader("Image", type=["jpg", "jpeg", "png", "webp"])

        col_save, col_cancel = st.columns(2)
        submitted = col_save.form_submit_button("Save", type="primary")
        cancelled = col_cancel.form_submit_button("Cancel")

    if cancelled:
        reset_forms()
        st.rerun()
    if not submitted:
        return

    errors = validate_course_input(name, description, schedule, professor)
    if not is_valid(errors):
        show_field_errors(errors)
        return

    if existing:
        changed = replace(existing, name=name, description=description, schedule=schedule, professor=professor)
        outcome = courses.update(changed, image=image)
    else:
        outcome = courses.create(name, description, schedule, professor, image=image)

    if report_result(outcome, "save course"):
        flash(f"Course '{name}' saved", "success")
        reset_forms()
        st.rerun()


if st.button("➕ Add course"):
    reset_forms()
    st.session_state["show_course_form"] = True

editing_id = st.session_state.get("editing_course_id")
if st.session_state.get("show_course_form") or editing_id is not None:
    editing = next((c for c in courses.items if c.id == editing_id), None)
    _course_form(editing)


# ============================================================================
# COURSE LIST
# ============================================================================
@error_boundary(error_message="Could not render the course list")
def render_courses(items):
    if not items:
        st.info("No courses saved yet.")
        return

    for course in items:
        with st.container(border=True):
            col_img, col_body, col_actions = st.columns([1, 4, 1])
            image_url = course.resolve_image_url(service.images_base_url)
            if image_url:
                col_img.image(image_url, use_container_width=True)
            col_body.markdown(f"### {course.name}")
            col_body.write(course.description)
            col_body.caption(f"🗓️ {course.schedule} · 👩‍🏫 {course.professor}")
            if course.is_from_cache:
                col_body.caption("Served from cache")

            if col_actions.button("Students", key=f"students_{course.id}"):
                select_course(course.id, course.name)
                st.switch_page("pages/01_Students.py")
            if col_actions.button("Edit", key=f"edit_{course.id}"):
                reset_forms()
                st.session_state["editing_course_id"] = course.id
                st.rerun()
            if col_actions.button("Delete", key=f"delete_{course.id}"):
                outcome = courses.delete(course.id)
                if outcome.success:
                    local = outcome.local_only
                    flash(
                        f"Course '{course.name}' deleted" + (" on this device only" if local else ""),
                        "warning" if local else "success",
                    )
                else:
                    flash(f"Could not delete course: {outcome.error}", "error")
                st.rerun()


render_courses(result.items)
