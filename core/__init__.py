"""
PotholeSpotter Core Package.

This package contains the session data model and the capture session
state machine, separated from the web layer.

ARCHITECTURE RULES:
- core/ modules may only import from:
  - Python standard library
  - providers/interfaces/ (collaborator contracts)
  - config / logging_config

- core/ modules MUST NOT import from:
  - web/ (no Flask dependencies)
  - providers/services/, camera/, utils/ (concrete platforms are injected)
  - flask, werkzeug, requests, cv2 or any other platform package
"""

__all__ = [
    "errors",
    "models",
    "session_controller",
    "session_states",
]
