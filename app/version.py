"""
Application version information.

Version format: MAJOR.MINOR
- MAJOR: Breaking API changes (0 while the /v1 surface settles)
- MINOR: Incremented with each merged PR

Version is logged on startup and returned by GET /.
"""

__version__ = "0.1"
