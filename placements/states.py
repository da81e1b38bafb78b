"""
Referral state machine.

Referrals move forward along the placement pipeline. `cancelled` and
`declined` are absorbing alternates that can be entered from any live state.
The sheet import assigns the furthest state it can read from the row
directly (a snapshot), so it never goes through `can_transition`.
"""

REFERRED = 'referred'
INTERVIEW_SCHEDULED = 'interview_scheduled'
INTERVIEW_DONE = 'interview_done'
HIRED = 'hired'
PRE_ASSIGNMENT = 'pre_assignment'
ASSIGNED = 'assigned'
WORKING = 'working'
FULL_PAID = 'full_paid'
CANCELLED = 'cancelled'
DECLINED = 'declined'

PIPELINE = (
    REFERRED,
    INTERVIEW_SCHEDULED,
    INTERVIEW_DONE,
    HIRED,
    PRE_ASSIGNMENT,
    ASSIGNED,
    WORKING,
    FULL_PAID,
)

ABSORBING = frozenset({CANCELLED, DECLINED})

REFERRAL_STATUS_CHOICES = [
    (REFERRED, 'Referred'),
    (INTERVIEW_SCHEDULED, 'Interview scheduled'),
    (INTERVIEW_DONE, 'Interview done'),
    (HIRED, 'Hired'),
    (PRE_ASSIGNMENT, 'Pre-assignment'),
    (ASSIGNED, 'Assigned'),
    (WORKING, 'Working'),
    (FULL_PAID, 'Fully paid'),
    (CANCELLED, 'Cancelled'),
    (DECLINED, 'Declined'),
]

REFERRAL_STATUSES = frozenset(value for value, _ in REFERRAL_STATUS_CHOICES)

# Statuses counted as "dispatch interview done" by the funnel
INTERVIEW_DONE_STATUSES = frozenset({
    INTERVIEW_DONE, HIRED, PRE_ASSIGNMENT, ASSIGNED, WORKING, FULL_PAID,
})


class InvalidTransition(Exception):
    """Raised when a referral is moved backwards or out of an absorbing state"""

    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move referral from '{current}' to '{target}'")


def is_valid_status(status):
    return status in REFERRAL_STATUSES


def can_transition(current, target):
    """
    Forward-only transition check.

    Absorbing states accept nothing; any live state may drop into an
    absorbing one; otherwise the target must be strictly further along.
    """
    if not is_valid_status(current) or not is_valid_status(target):
        return False
    if current in ABSORBING:
        return False
    if target in ABSORBING:
        return True
    return PIPELINE.index(target) > PIPELINE.index(current)
