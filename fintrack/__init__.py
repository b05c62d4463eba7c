"""
FinTrack - Security Core

Authentication guard rails for the FinTrack personal finance tracker:
rate limiting, password strength scoring, input validation and a
bounded audit trail.

DESIGN PRINCIPLES:
1. Deny early, before the auth backend is touched
2. Validation failures are results, not exceptions
3. Audit logging never breaks the primary flow
4. No hidden singletons - components are wired explicitly
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "FinTrack Team"
