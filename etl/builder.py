"""
Turn one sheet row into the records it implies.

A row yields, in foreign-key order: a job seeker (get-or-create), one
application, at most one phone-screen interview, at most one referral and
up to three sales. Only the job seeker is written here; everything else is
returned unsaved so the loader can insert it in batches.
"""
import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date

from placements.models import Application, Interview, Referral, Sale

from . import codes
from .normalizers import (
    FULL_DATE_RE,
    clean_text,
    normalize_phone,
    parse_amount,
    parse_boolean,
    parse_date,
    parse_gender,
    parse_month_day,
    parse_month_marker,
    parse_number,
    parse_time,
    parse_year,
    to_local_datetime,
)
from .resolver import application_key

logger = logging.getLogger(__name__)

# Month-only dates (fiscal month, work month on sales) are pinned mid-month
MID_MONTH_DAY = 15

# Height and weight are stored with 3 integer digits
MEASURE_LIMIT = 1000

SALE_COLUMNS = (
    ('expected', 'expected_revenue'),
    ('confirmed', 'confirmed_revenue'),
    ('paid', 'paid_amount'),
)


def _joined(first, second):
    if first and second:
        return f"{first} {second}"
    return first or second


def full_name(row):
    """Full name, else last+first, else kana, else kana last+first"""
    return (
        row.get('name')
        or _joined(row.get('name_last'), row.get('name_first'))
        or row.get('kana')
        or _joined(row.get('kana_last'), row.get('kana_first'))
    )


def kana_name(row):
    return row.get('kana') or _joined(row.get('kana_last'), row.get('kana_first'))


def work_year(row):
    """Year used for M/D work and dispatch dates: dispatch year, else schedule year"""
    return parse_year(row.get('dispatch_year')) or parse_year(row.get('schedule_year'))


@dataclass(frozen=True)
class WorkMonth:
    month: date
    start_work_date: date = None


def work_month_from_start_day(row):
    raw = row.get('start_work_day')
    if FULL_DATE_RE.match(clean_text(raw)):
        start = parse_date(raw)
    else:
        start = parse_month_day(raw, work_year(row))
    if start is None:
        return None
    return WorkMonth(month=start.replace(day=1), start_work_date=start)


def work_month_from_dispatch_marker(row):
    year = work_year(row)
    if year is None:
        return None
    month = parse_month_marker(str(year), row.get('dispatch_month'))
    if month is None:
        return None
    return WorkMonth(month=month)


# Tried in order; the first extractor returning a value wins
WORK_MONTH_EXTRACTORS = (
    work_month_from_start_day,
    work_month_from_dispatch_marker,
)


def derive_work_month(row):
    for extractor in WORK_MONTH_EXTRACTORS:
        work_month = extractor(row)
        if work_month is not None:
            return work_month
    return None


@dataclass
class RecordGraph:
    line_number: int
    job_seeker_id: int
    application: Application
    interview: Interview = None
    referral: Referral = None
    sales: list = field(default_factory=list)


class RecordBuilder:
    def __init__(self, organization, masters, job_seekers, stats=None, existing=None, today=None):
        self.organization = organization
        self.masters = masters
        self.job_seekers = job_seekers
        self.stats = stats if stats is not None else Counter()
        self.existing = existing
        self.today = today or date.today()

    def _date(self, row, key):
        raw = row.get(key)
        value = parse_date(raw, today=self.today)
        if raw and value is None:
            self.stats['unparseable_dates'] += 1
            logger.debug(f"Line {row.line_number}: unparseable date in {key}: {raw!r}")
        return value

    def _amount(self, row, key):
        raw = row.get(key)
        value = parse_amount(raw)
        if raw and value is None:
            self.stats['unparseable_amounts'] += 1
            logger.debug(f"Line {row.line_number}: unparseable amount in {key}: {raw!r}")
        return value

    def _measure(self, row, key):
        value = parse_number(row.get(key))
        if value is None or value < 0 or value >= MEASURE_LIMIT:
            return None
        return value

    def fiscal_date(self, row):
        """Screening date, else the mid-month day of the schedule (year, month) marker"""
        return self._date(row, 'screening_date') or parse_month_marker(
            row.get('schedule_year'), row.get('schedule_month'), day=MID_MONTH_DAY
        )

    def dispatch_interview_date(self, row):
        raw = row.get('dispatch_interview_date')
        if not raw:
            return None
        if FULL_DATE_RE.match(clean_text(raw)):
            return self._date(row, 'dispatch_interview_date')
        value = parse_month_day(raw, work_year(row))
        if value is None:
            self.stats['unparseable_dates'] += 1
        return value

    def profile(self, row, name):
        medical = row.get('medical')
        return {
            'name': name,
            'name_kana': kana_name(row) or None,
            'birth_date': self._date(row, 'birth_date'),
            'gender': parse_gender(row.get('gender')),
            'postal_code': row.get('postal_code')[:10] or None,
            'prefecture': row.get('prefecture') or None,
            'city': row.get('city') or None,
            'height': self._measure(row, 'height'),
            'weight': self._measure(row, 'weight'),
            'has_tattoo': parse_boolean(row.get('tattoo')),
            'has_medical_condition': parse_boolean(medical),
            'medical_condition_detail': medical or None,
            'has_spouse': parse_boolean(row.get('spouse')),
            'has_children': parse_boolean(row.get('children')),
        }

    def build(self, row):
        """Return the RecordGraph for `row`, or None when the row is skipped"""
        phone = normalize_phone(row.get('phone'))
        name = full_name(row)
        if not phone and not name:
            self.stats['skipped_no_identity'] += 1
            return None
        if not phone:
            self.stats['missing_phone'] += 1

        applied_date = self._date(row, 'applied_date')
        if applied_date is None:
            self.stats['missing_applied_date'] += 1
            applied_date = self.today

        key = application_key(phone, applied_date)
        if self.existing is not None and key in self.existing:
            self.stats['skipped_existing'] += 1
            return None

        job_seeker_id = self.job_seekers.resolve(phone, **self.profile(row, name))
        if job_seeker_id is None:
            self.stats['skipped_job_seeker_failed'] += 1
            logger.warning(f"Line {row.line_number}: job seeker could not be written, row skipped")
            return None
        coordinator_id = self.masters.coordinator_id(row.get('coordinator'))
        fiscal_date = self.fiscal_date(row)

        application = Application(
            organization=self.organization,
            job_seeker_id=job_seeker_id,
            source_id=self.masters.source_id(row.get('source')),
            coordinator_id=coordinator_id,
            application_status=codes.application_status(row.get('inquiry_status')),
            progress_status=codes.progress_status(
                row.get('payment_progress'), row.get('progress'), row.get('connection_status')
            ),
            job_type=row.get('job_type') or None,
            applied_at=to_local_datetime(applied_date),
            notes=row.get('notes') or None,
        )
        graph = RecordGraph(
            line_number=row.line_number,
            job_seeker_id=job_seeker_id,
            application=application,
        )
        if self.existing is not None:
            self.existing.add(key)

        graph.interview = self.build_interview(row, application, coordinator_id, fiscal_date, applied_date)
        graph.referral = self.build_referral(row, application, fiscal_date, applied_date)
        if graph.referral is not None:
            work_date = graph.referral.work_month
            if work_date is not None:
                work_date = work_date.replace(day=MID_MONTH_DAY)
            graph.sales = self.build_sales(row, graph.referral, work_date or fiscal_date or applied_date)
        return graph

    def build_interview(self, row, application, coordinator_id, fiscal_date, applied_date):
        result = codes.screening_result(row.get('screening_outcome'))
        if result is None:
            return None
        scheduled_at = to_local_datetime(
            fiscal_date or applied_date, parse_time(row.get('screening_time'))
        )
        return Interview(
            organization=self.organization,
            application_id=application.id,
            interview_type='phone',
            scheduled_at=scheduled_at,
            conducted_at=scheduled_at if result == Interview.RESULT_COMPLETED else None,
            result=result,
            interviewer_id=coordinator_id,
        )

    def resolve_job(self, row):
        company_name = row.get('company')
        if not company_name:
            return self.masters.placeholder_job_id()
        company_id = self.masters.company_id(company_name)
        if company_id is None:
            return None
        return self.masters.job_id(
            company_id, row.get('job_title') or company_name, row.get('job_type') or None
        )

    def build_referral(self, row, application, fiscal_date, applied_date):
        if not codes.is_connected(row.get('connection_status')):
            return None

        job_id = self.resolve_job(row)
        if job_id is None:
            self.stats['referrals_unresolved_company'] += 1
            logger.warning(
                f"Line {row.line_number}: company {row.get('company')!r} could not be resolved, "
                f"referral skipped"
            )
            return None

        dispatch_date = self.dispatch_interview_date(row)
        hired_at = None
        if codes.is_hired(row.get('hiring_result')):
            hired_at = to_local_datetime(dispatch_date or applied_date)

        work_month = derive_work_month(row)
        if work_month is None:
            self.stats['work_month_unresolved'] += 1

        return Referral(
            organization=self.organization,
            application_id=application.id,
            job_id=job_id,
            referral_status=codes.referral_status(row.get('progress'), row.get('connection_status')),
            referred_at=to_local_datetime(fiscal_date or applied_date),
            dispatch_interview_at=to_local_datetime(dispatch_date),
            hired_at=hired_at,
            assignment_date=self._date(row, 'assignment_date'),
            start_work_date=work_month.start_work_date if work_month else None,
            work_month=work_month.month if work_month else None,
        )

    def build_sales(self, row, referral, on_date):
        sales = []
        for status, key in SALE_COLUMNS:
            amount = self._amount(row, key)
            if amount is None or amount <= 0:
                continue
            sales.append(Sale.for_status(
                status,
                on_date,
                organization=self.organization,
                referral_id=referral.id,
                amount=amount,
            ))
        return sales
