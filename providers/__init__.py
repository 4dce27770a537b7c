"""
PotholeSpotter session collaborators.

interfaces/ defines the contracts the session controller depends on,
services/ holds the concrete platform-backed implementations.
"""
