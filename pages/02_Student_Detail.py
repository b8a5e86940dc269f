# =============================================================================
# pages/02_Student_Detail.py - One student with the name of their course
# =============================================================================
from __future__ import annotations

import streamlit as st

from course_core.errors.handlers import ErrorContext
from course_core.offline import get_data_service
from course_core.state.session import init_state
from course_core.ui.components import header, announce_data_source, render_connection_sidebar

st.set_page_config(page_title="Student", page_icon="🧑‍🎓", layout="centered")
init_state()

service = get_data_service()
service.cancel_pending()
students = service.students

render_connection_sidebar(service)

student_id = st.session_state.get("selected_student_id")
if student_id is None:
    st.error("Error: invalid student")
    st.stop()

with st.spinner("Loading student..."), ErrorContext(f"Loading student {student_id}") as ctx:
    result = service.submit(students.read_one, student_id).result()
if ctx.failed:
    st.stop()

announce_data_source(students)
student = result.first

if student is None:
    header("Student", "Not available offline")
    st.info("This student has not been saved on this device yet.")
else:
    header(student.name, result.parent_name or "Course not saved on this device")
    st.markdown(f"**Email:** {student.email}")
    st.markdown(f"**Phone:** {student.phone}")
    if result.parent_name:
        st.markdown(f"**Course:** {result.parent_name}")
    if result.error:
        st.caption(f"Last refresh failed: {result.error}")

if st.button("← Back to students"):
    st.switch_page("pages/01_Students.py")
