"""Main application entry point for the FastAPI application.

This module initializes the application and creates the FastAPI instance using
the application factory pattern. Run it with ``uvicorn chatauth.main:app``.
"""

from chatauth.core.application import create_application
from chatauth.core.initialization import initialize_application

# Initialize the application
initialize_application()

# Create the FastAPI application
app = create_application()
