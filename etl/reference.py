"""
Monthly totals computed by the spreadsheet itself, used as the known-good
side of the validation pass.
"""

# month -> {metric: total}; metric names match FunnelMonth attributes
REFERENCE_TOTALS = {
    '2025-01': {'interviews_done': 258, 'referrals': 103},
    '2025-02': {'interviews_done': 266, 'referrals': 93},
    '2025-03': {'interviews_done': 306, 'referrals': 118},
    '2025-04': {'interviews_done': 332, 'referrals': 127},
    '2025-05': {'interviews_done': 310, 'referrals': 119},
    '2025-06': {'interviews_done': 385, 'referrals': 164},
    '2025-07': {'interviews_done': 384, 'referrals': 168},
    '2025-08': {'interviews_done': 306, 'referrals': 124},
    '2025-09': {'interviews_done': 306, 'referrals': 145},
    '2025-10': {'interviews_done': 293, 'referrals': 149},
    '2025-11': {'interviews_done': 193, 'referrals': 86},
    '2025-12': {'interviews_done': 172, 'referrals': 85},
}
