"""Handler modules for the faros operator."""

# Import handlers to ensure kopf registers them
from . import gittrackobject_handler

__all__ = ["gittrackobject_handler"]
