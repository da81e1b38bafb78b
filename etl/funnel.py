"""
Monthly funnel metrics and their reconciliation against reference totals.

Every metric has its own month basis and they must stay separate:

    interviews_done     Interview.conducted_at set        Interview.scheduled_at
    referrals           every referral                    Referral.referred_at
    dispatch_scheduled  dispatch_interview_at set         Referral.referred_at
    dispatch_done       status at or past interview_done  Referral.referred_at
    hired               hired_at set                      Referral.referred_at
    expected_*          Sale.status == expected           Sale.expected_date
    working_*           confirmed and start_work_date set Sale.confirmed_date
    paid_amount         Sale.status == paid               Sale.paid_date

The work-month plan is a second, independent aggregation keyed by the
referral's work month.
"""
import logging
from collections import Counter, defaultdict
from dataclasses import dataclass, field, fields
from decimal import Decimal

import pandas as pd

from placements import states
from placements.models import Interview, Referral, Sale

from . import codes
from .loader import fetch_all_rows
from .normalizers import month_key, parse_month_marker
from .reference import REFERENCE_TOTALS

logger = logging.getLogger(__name__)

INTERVIEW_FIELDS = ('id', 'scheduled_at', 'conducted_at')
REFERRAL_FIELDS = (
    'id', 'referred_at', 'dispatch_interview_at', 'referral_status',
    'hired_at', 'start_work_date', 'work_month',
)
SALE_FIELDS = (
    'id', 'referral_id', 'status', 'amount',
    'expected_date', 'confirmed_date', 'invoiced_date', 'paid_date',
)


@dataclass
class FunnelMonth:
    interviews_done: int = 0
    referrals: int = 0
    dispatch_scheduled: int = 0
    dispatch_done: int = 0
    hired: int = 0
    expected_count: int = 0
    expected_amount: Decimal = Decimal('0')
    working_count: int = 0
    working_amount: Decimal = Decimal('0')
    paid_amount: Decimal = Decimal('0')


@dataclass
class FunnelReport:
    months: dict = field(default_factory=lambda: defaultdict(FunnelMonth))
    # Rows whose month basis was null, by metric
    undated: Counter = field(default_factory=Counter)

    def month(self, key):
        return self.months.get(key) or FunnelMonth()

    def to_frame(self):
        records = [
            {'month': key, **{f.name: getattr(values, f.name) for f in fields(FunnelMonth)}}
            for key, values in sorted(self.months.items())
        ]
        columns = ['month'] + [f.name for f in fields(FunnelMonth)]
        return pd.DataFrame(records, columns=columns).set_index('month')


def _bucket(report, value, metric):
    key = month_key(value)
    if key is None:
        report.undated[metric] += 1
        return None
    return report.months[key]


def compute_funnel(interviews, referrals, sales):
    """Aggregate plain row dictionaries (as read by `load_funnel_inputs`) by month"""
    report = FunnelReport()

    for interview in interviews:
        if interview.get('conducted_at') is None:
            continue
        bucket = _bucket(report, interview.get('scheduled_at'), 'interviews_done')
        if bucket:
            bucket.interviews_done += 1

    start_work_by_referral = {}
    for referral in referrals:
        start_work_by_referral[referral['id']] = referral.get('start_work_date')
        bucket = _bucket(report, referral.get('referred_at'), 'referrals')
        if bucket is None:
            continue
        bucket.referrals += 1
        if referral.get('dispatch_interview_at') is not None:
            bucket.dispatch_scheduled += 1
        if referral.get('referral_status') in states.INTERVIEW_DONE_STATUSES:
            bucket.dispatch_done += 1
        if referral.get('hired_at') is not None:
            bucket.hired += 1

    for sale in sales:
        amount = Decimal(sale.get('amount') or 0)
        status = sale.get('status')
        if status == 'expected':
            bucket = _bucket(report, sale.get('expected_date'), 'expected')
            if bucket:
                bucket.expected_count += 1
                bucket.expected_amount += amount
        elif status == 'confirmed':
            if start_work_by_referral.get(sale.get('referral_id')) is None:
                continue
            bucket = _bucket(report, sale.get('confirmed_date'), 'working')
            if bucket:
                bucket.working_count += 1
                bucket.working_amount += amount
        elif status == 'paid':
            bucket = _bucket(report, sale.get('paid_date'), 'paid')
            if bucket:
                bucket.paid_amount += amount

    return report


@dataclass
class WorkMonthRow:
    prospective_count: int = 0
    prospective_amount: Decimal = Decimal('0')
    working_count: int = 0
    working_amount: Decimal = Decimal('0')


@dataclass
class WorkMonthPlan:
    months: dict = field(default_factory=lambda: defaultdict(WorkMonthRow))
    unresolved_referrals: int = 0

    def to_frame(self):
        records = [
            {'work_month': key, **{f.name: getattr(values, f.name) for f in fields(WorkMonthRow)}}
            for key, values in sorted(self.months.items())
        ]
        columns = ['work_month'] + [f.name for f in fields(WorkMonthRow)]
        return pd.DataFrame(records, columns=columns).set_index('work_month')


def compute_work_month_plan(referrals, sales):
    """
    Prospective vs actually-working revenue per work month.

    Prospective is expected sales; working is confirmed sales whose referral
    has a start-of-work date. Referrals without a work month are left out
    and counted.
    """
    plan = WorkMonthPlan()
    by_id = {}
    for referral in referrals:
        if referral.get('work_month') is None:
            plan.unresolved_referrals += 1
            continue
        by_id[referral['id']] = referral

    for sale in sales:
        referral = by_id.get(sale.get('referral_id'))
        if referral is None:
            continue
        amount = Decimal(sale.get('amount') or 0)
        row = plan.months[month_key(referral['work_month'])]
        if sale.get('status') == 'expected':
            row.prospective_count += 1
            row.prospective_amount += amount
        elif sale.get('status') == 'confirmed' and referral.get('start_work_date') is not None:
            row.working_count += 1
            row.working_amount += amount
    return plan


def compute_sheet_funnel(rows):
    """
    Sheet-side tallies by (schedule year, schedule month), read straight
    from the rows without touching the database. Used by the dry run.
    """
    report = FunnelReport()
    for row in rows:
        month = parse_month_marker(row.get('schedule_year'), row.get('schedule_month'))
        if month is None:
            report.undated['rows'] += 1
            continue
        bucket = report.months[month_key(month)]
        if codes.screening_result(row.get('screening_outcome')) == Interview.RESULT_COMPLETED:
            bucket.interviews_done += 1
        if not codes.is_connected(row.get('connection_status')):
            continue
        bucket.referrals += 1
        if row.get('dispatch_interview_date'):
            bucket.dispatch_scheduled += 1
        status = codes.referral_status(row.get('progress'), row.get('connection_status'))
        if status in states.INTERVIEW_DONE_STATUSES:
            bucket.dispatch_done += 1
        if codes.is_hired(row.get('hiring_result')):
            bucket.hired += 1
    return report


@dataclass(frozen=True)
class MonthDelta:
    month: str
    metric: str
    expected: int
    actual: int

    @property
    def delta(self):
        return self.actual - self.expected


def diff_against_reference(report, reference=None):
    """Per-month, per-metric deltas; a mismatch is reported, never raised"""
    reference = REFERENCE_TOTALS if reference is None else reference
    deltas = []
    for month, totals in sorted(reference.items()):
        computed = report.month(month)
        for metric, expected in totals.items():
            deltas.append(MonthDelta(month, metric, expected, getattr(computed, metric)))
    mismatched = [d for d in deltas if d.delta]
    if mismatched:
        logger.info(f"{len(mismatched)} of {len(deltas)} reference figures differ")
    return deltas


def comparison_frame(deltas):
    """Computed vs expected, one row per month, three columns per metric"""
    table = defaultdict(dict)
    metrics = []
    for d in deltas:
        if d.metric not in metrics:
            metrics.append(d.metric)
        table[d.month][f'{d.metric}_expected'] = d.expected
        table[d.month][f'{d.metric}_actual'] = d.actual
        table[d.month][f'{d.metric}_delta'] = d.delta
    columns = [f'{m}_{part}' for m in metrics for part in ('expected', 'actual', 'delta')]
    frame = pd.DataFrame.from_dict(table, orient='index', columns=columns)
    frame.index.name = 'month'
    return frame.sort_index()


def load_funnel_inputs(organization, page_size=1000):
    """Read the persisted rows every metric is computed from"""
    interviews = fetch_all_rows(
        Interview.objects.filter(organization=organization), page_size, INTERVIEW_FIELDS
    )
    referrals = fetch_all_rows(
        Referral.objects.filter(organization=organization), page_size, REFERRAL_FIELDS
    )
    sales = fetch_all_rows(Sale.objects.filter(organization=organization), page_size, SALE_FIELDS)
    return interviews, referrals, sales


def sale_date_gaps(sales):
    """Sales missing the date their status requires, by status"""
    gaps = Counter()
    for sale in sales:
        date_field = Sale.DATE_FIELD_BY_STATUS.get(sale.get('status'))
        if date_field and sale.get(date_field) is None:
            gaps[sale['status']] += 1
    return gaps
