"""Cloud Function Entry Point - Root Module.

This is the root-level entry point for Google Cloud Functions.
It imports from the coordlog package.
"""

from coordlog.main import coordinate_webhook

__all__ = [
    "coordinate_webhook",
]
