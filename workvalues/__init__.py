"""
Work Values Matching Pipeline

This package converts a subject's ranked work-value preferences into
normalized need and value scores, and matches the resulting profile against
a reference catalog of occupations.

Key Design Decisions:
- Instrument (needs, values, rounds) is immutable, versioned configuration
- Scores are derived in one batch once every round has been answered
- Occupation matching uses Pearson correlation with fixed significance cutoffs
- Derived output is replaced atomically and can be recomputed at any time
"""

__version__ = "1.0.0"
