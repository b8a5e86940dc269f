"""
Redirect file for Streamlit Cloud compatibility.
Deployments that expect app.py as the entry point land on the course list.

The actual application code is in Welcome.py.
"""

# Import and run the main Welcome.py application
import sys
import os

# Ensure the current directory is in the path
sys.path.insert(0, os.path.dirname(__file__))

import Welcome
