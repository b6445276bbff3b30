"""Business rule constants.

Thresholds are kept separate on purpose: credits are awarded strictly
above ``PASSING_GRADE_THRESHOLD`` while certificates are issued at or
above ``CERTIFICATE_THRESHOLD``.  Exactly 7.0 earns a certificate but
no credits.
"""

from __future__ import annotations

MIN_GRADE = 0.0
MAX_GRADE = 10.0
GRADE_DECIMALS = 2

PASSING_GRADE_THRESHOLD = 7.0      # exclusive
CREDITS_PER_APPROVED_COURSE = 3

CERTIFICATE_THRESHOLD = 7.0        # inclusive
MILESTONE_INTERVAL = 5

COURSE_COMPLETED_EVENT_TYPE = "COURSE_COMPLETED"
