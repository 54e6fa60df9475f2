"""
GuidanceHub
Career guidance backend: adaptive quiz, career matching, college search,
admissions and notifications.

Architecture:
- FastAPI routes -> services -> MongoDB collections
- Scoring/matching heuristics are plain functions in guidancehub.services
"""

__version__ = "1.0.0"
