"""
LiveShareNow UI automation package.

Kept importable so that `run_tests.py`, IDEs and CI jobs can reach the
page objects and framework helpers directly.

Credentials are never stored here; supply them through environment variables.
"""
