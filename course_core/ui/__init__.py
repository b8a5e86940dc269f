# =============================================================================
# course_core/ui/__init__.py
# Shared Streamlit widgets for the pages
# =============================================================================
