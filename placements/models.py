import uuid

from django.core.exceptions import ValidationError
from django.db import models

from .states import REFERRAL_STATUS_CHOICES, REFERRED, InvalidTransition, can_transition


class Organization(models.Model):
    name = models.CharField(max_length=255)
    code = models.CharField(max_length=50, unique=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.code})"


class Coordinator(models.Model):
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='coordinators')
    name = models.CharField(max_length=255)
    email = models.CharField(max_length=255, null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name


class Source(models.Model):
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='sources')
    name = models.CharField(max_length=255)
    cost_per_application = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name


class Company(models.Model):
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='companies')
    name = models.CharField(max_length=255)
    notes = models.TextField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name


class Job(models.Model):
    STATUS_CHOICES = [
        ('open', 'Open'),
        ('closed', 'Closed'),
        ('paused', 'Paused'),
    ]
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='jobs')
    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name='jobs')
    title = models.CharField(max_length=255)
    job_type = models.CharField(max_length=100, null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='open')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.title} @ {self.company_id}"


class JobSeeker(models.Model):
    GENDER_CHOICES = [
        ('male', 'Male'),
        ('female', 'Female'),
        ('other', 'Other'),
    ]
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='job_seekers')
    phone = models.CharField(max_length=20, db_index=True)
    name = models.CharField(max_length=255)
    name_kana = models.CharField(max_length=255, null=True, blank=True)
    birth_date = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES, null=True, blank=True)
    postal_code = models.CharField(max_length=10, null=True, blank=True)
    prefecture = models.CharField(max_length=50, null=True, blank=True)
    city = models.CharField(max_length=100, null=True, blank=True)
    height = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    weight = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    has_tattoo = models.BooleanField(default=False)
    has_medical_condition = models.BooleanField(default=False)
    medical_condition_detail = models.TextField(null=True, blank=True)
    has_spouse = models.BooleanField(default=False)
    has_children = models.BooleanField(default=False)
    notes = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.phone})"


class Application(models.Model):
    APPLICATION_STATUS_CHOICES = [
        ('new', 'New'),
        ('valid', 'Valid'),
        ('invalid', 'Invalid'),
        ('no_answer', 'No answer'),
        ('connected', 'Connected'),
        ('working', 'Working'),
        ('completed', 'Completed'),
    ]
    PROGRESS_STATUS_CHOICES = [
        ('phone_interview_scheduled', 'Phone interview scheduled'),
        ('phone_interview_done', 'Phone interview done'),
        ('referred', 'Referred'),
        ('dispatch_interview_scheduled', 'Dispatch interview scheduled'),
        ('dispatch_interview_done', 'Dispatch interview done'),
        ('hired', 'Hired'),
        ('pre_assignment', 'Pre-assignment'),
        ('assigned', 'Assigned'),
        ('working', 'Working'),
        ('full_paid', 'Fully paid'),
    ]
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='applications')
    job_seeker = models.ForeignKey(JobSeeker, on_delete=models.CASCADE, related_name='applications')
    source = models.ForeignKey(Source, on_delete=models.SET_NULL, null=True, blank=True, related_name='applications')
    coordinator = models.ForeignKey(Coordinator, on_delete=models.SET_NULL, null=True, blank=True, related_name='applications')
    application_status = models.CharField(max_length=20, choices=APPLICATION_STATUS_CHOICES, default='new')
    progress_status = models.CharField(max_length=30, choices=PROGRESS_STATUS_CHOICES, null=True, blank=True)
    job_type = models.CharField(max_length=100, null=True, blank=True)
    applied_at = models.DateTimeField()
    notes = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Application {self.id} ({self.application_status})"


class ContactLog(models.Model):
    CONTACT_TYPE_CHOICES = [
        ('phone', 'Phone'),
        ('email', 'Email'),
        ('line', 'LINE'),
        ('other', 'Other'),
    ]
    DIRECTION_CHOICES = [
        ('inbound', 'Inbound'),
        ('outbound', 'Outbound'),
    ]
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='contact_logs')
    application = models.ForeignKey(Application, on_delete=models.CASCADE, related_name='contact_logs')
    contact_type = models.CharField(max_length=20, choices=CONTACT_TYPE_CHOICES)
    direction = models.CharField(max_length=20, choices=DIRECTION_CHOICES)
    result = models.CharField(max_length=255, null=True, blank=True)
    notes = models.TextField(null=True, blank=True)
    contacted_by = models.ForeignKey(Coordinator, on_delete=models.SET_NULL, null=True, blank=True, related_name='contact_logs')
    contacted_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.contact_type} {self.direction} at {self.contacted_at}"


class Interview(models.Model):
    INTERVIEW_TYPE_CHOICES = [
        ('phone', 'Phone'),
        ('video', 'Video'),
        ('in_person', 'In person'),
    ]
    RESULT_COMPLETED = 'completed'
    RESULT_CANCELLED = 'cancelled'
    RESULT_DECLINED = 'declined'
    # Written by an older import; same meaning as "completed"
    LEGACY_RESULT_COMPLETED = '完了'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='interviews')
    application = models.ForeignKey(Application, on_delete=models.CASCADE, related_name='interviews')
    contact_log = models.ForeignKey(ContactLog, on_delete=models.SET_NULL, null=True, blank=True, related_name='interviews')
    interview_type = models.CharField(max_length=20, choices=INTERVIEW_TYPE_CHOICES, null=True, blank=True)
    scheduled_at = models.DateTimeField()
    conducted_at = models.DateTimeField(null=True, blank=True)
    result = models.CharField(max_length=255, null=True, blank=True)
    interviewer = models.ForeignKey(Coordinator, on_delete=models.SET_NULL, null=True, blank=True, related_name='interviews')
    notes = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Interview {self.id} ({self.result})"


class Referral(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='referrals')
    application = models.ForeignKey(Application, on_delete=models.CASCADE, related_name='referrals')
    job = models.ForeignKey(Job, on_delete=models.PROTECT, related_name='referrals')
    referral_status = models.CharField(max_length=30, choices=REFERRAL_STATUS_CHOICES, default=REFERRED)
    referred_at = models.DateTimeField()
    dispatch_interview_at = models.DateTimeField(null=True, blank=True)
    hired_at = models.DateTimeField(null=True, blank=True)
    assignment_date = models.DateField(null=True, blank=True)
    start_work_date = models.DateField(null=True, blank=True)
    work_month = models.DateField(null=True, blank=True)
    notes = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def advance_to(self, status):
        """Move along the pipeline; bulk import assigns snapshot states instead"""
        if not can_transition(self.referral_status, status):
            raise InvalidTransition(self.referral_status, status)
        self.referral_status = status

    def __str__(self):
        return f"Referral {self.id} ({self.referral_status})"


class Sale(models.Model):
    STATUS_CHOICES = [
        ('expected', 'Expected'),
        ('confirmed', 'Confirmed'),
        ('invoiced', 'Invoiced'),
        ('paid', 'Paid'),
    ]
    # Each status owns exactly one date column
    DATE_FIELD_BY_STATUS = {
        'expected': 'expected_date',
        'confirmed': 'confirmed_date',
        'invoiced': 'invoiced_date',
        'paid': 'paid_date',
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='sales')
    referral = models.ForeignKey(Referral, on_delete=models.CASCADE, related_name='sales')
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='expected')
    expected_date = models.DateField(null=True, blank=True)
    confirmed_date = models.DateField(null=True, blank=True)
    invoiced_date = models.DateField(null=True, blank=True)
    paid_date = models.DateField(null=True, blank=True)
    notes = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @classmethod
    def for_status(cls, status, on_date, **kwargs):
        """Build an unsaved sale with only the date column belonging to `status` set"""
        if status not in cls.DATE_FIELD_BY_STATUS:
            raise ValueError(f"Unknown sale status: {status}")
        kwargs[cls.DATE_FIELD_BY_STATUS[status]] = on_date
        return cls(status=status, **kwargs)

    def clean(self):
        super().clean()
        own_field = self.DATE_FIELD_BY_STATUS.get(self.status)
        stray = [
            field for field in self.DATE_FIELD_BY_STATUS.values()
            if field != own_field and getattr(self, field) is not None
        ]
        if stray:
            raise ValidationError(
                f"Sale with status '{self.status}' must not set {', '.join(stray)}"
            )

    def __str__(self):
        return f"Sale {self.amount} ({self.status})"
