# =============================================================================
# pages/01_Students.py - Students of the selected course
# List, add, edit and delete the students enrolled in one course.
# =============================================================================
from __future__ import annotations
from dataclasses import replace

import streamlit as st

from course_core.errors.handlers import error_boundary, report_result, safe_execute
from course_core.offline import get_data_service
from course_core.services.validation import validate_student_input, is_valid
from course_core.state.session import init_state, flash, show_flash, select_student, reset_forms
from course_core.ui.components import (
    header,
    announce_data_source,
    render_connection_sidebar,
    show_field_errors,
)

st.set_page_config(page_title="Students", page_icon="🧑‍🎓", layout="wide")
init_state()

service = get_data_service()
service.cancel_pending()
students = service.students

render_connection_sidebar(service)

course_id = st.session_state.get("selected_course_id")
course_name = st.session_state.get("selected_course_name") or ""
if course_id is None:
    st.warning("Pick a course first.")
    if st.button("← Back to courses"):
        st.switch_page("Welcome.py")
    st.stop()

header(f"Students · {course_name}", "Students enrolled in this course.")
show_flash()

with st.spinner("Loading students..."):
    result = safe_execute(
        lambda: service.submit(students.read_by_parent, course_id).result(),
        error_message="Failed to load students",
    )
if result is None:
    st.stop()

announce_data_source(students)
if result.error:
    st.caption(f"Last refresh failed: {result.error}")


# ---- Form -------------------------------------------------------------------
def _student_form(existing=None):
    with st.form("student_form", clear_on_submit=existing is None):
        st.markdown("#### " + ("Edit student" if existing else "Add student"))
        name = st.text_input("Name", value=existing.name if existing else "")
        email = st.text_input("Email", value=existing.email if existing else "")
        phone = st.text_input("Phone", value=existing.phone if existing else "")

        col_save, col_cancel = st.columns(2)
        submitted = col_save.form_submit_button("Save", type="primary")
        cancelled = col_cancel.form_submit_button("Cancel")

    if cancelled:
        reset_forms()
        st.rerun()
    if not submitted:
        return

    errors = validate_student_input(name, email, phone, course_id)
    if not is_valid(errors):
        show_field_errors(errors)
        return

    if existing:
        outcome = students.update(
            replace(existing, name=name, email=email, phone=phone),
        )
    else:
        outcome = students.create(name, email, phone, course_id)

    if report_result(outcome, "save student"):
        flash(f"Student '{name}' saved", "success")
        reset_forms()
        st.rerun()


col_back, col_add = st.columns([1, 1])
if col_back.button("← Back to courses"):
    st.switch_page("Welcome.py")
if col_add.button("➕ Add student"):
    reset_forms()
    st.session_state["show_student_form"] = True

editing_id = st.session_state.get("editing_student_id")
if st.session_state.get("show_student_form") or editing_id is not None:
    _student_form(next((s for s in students.items if s.id == editing_id), None))


# ---- List -------------------------------------------------------------------
@error_boundary(error_message="Could not render the student list")
def render_students(items):
    if not items:
        st.info("No students in this course yet.")
        return

    for student in items:
        with st.container(border=True):
            col_body, col_actions = st.columns([5, 1])
            col_body.markdown(f"**{student.name}**")
            col_body.caption(f"✉️ {student.email} · 📞 {student.phone}")

            if col_actions.button("Details", key=f"details_{student.id}"):
                select_student(student.id)
                st.switch_page("pages/02_Student_Detail.py")
            if col_actions.button("Edit", key=f"edit_{student.id}"):
                reset_forms()
                st.session_state["editing_student_id"] = student.id
                st.rerun()
            if col_actions.button("Delete", key=f"delete_{student.id}"):
                outcome = students.delete(student.id)
                if outcome.success:
                    local = outcome.local_only
                    flash(
                        f"Student '{student.name}' deleted" + (" on this device only" if local else ""),
                        "warning" if local else "success",
                    )
                else:
                    flash(f"Could not delete student: {outcome.error}", "error")
                st.rerun()


render_students(result.items)
