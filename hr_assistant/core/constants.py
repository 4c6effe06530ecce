"""Application constants.

Table names, scheduling defaults, store error codes and email endpoints.
"""

# ---------------------------------------------------------------------------
# Supabase tables
# ---------------------------------------------------------------------------
HR_USERS_TABLE: str = "hr_users"
HR_AVAILABILITY_TABLE: str = "hr_availability"
INTERVIEWS_TABLE: str = "interviews"
APPLICANTS_TABLE: str = "applicants"

# Interview rows joined with the owning applicant's contact fields
INTERVIEW_WITH_APPLICANT_SELECT: str = "*, applicants:applicant_id (id, name, email)"

# ---------------------------------------------------------------------------
# Scheduling
# ---------------------------------------------------------------------------
DEFAULT_SLOT_DURATION_MINUTES: int = 30
DEFAULT_WEEKS_AHEAD: int = 4
DAYS_PER_WEEK: int = 7

# Postgres SQLSTATE for unique_violation, surfaced by PostgREST as ``code``
UNIQUE_VIOLATION_CODE: str = "23505"

# ---------------------------------------------------------------------------
# Email
# ---------------------------------------------------------------------------
SENDGRID_TIMEOUT_SECONDS: float = 15.0

DATE_DISPLAY_FORMAT: str = "%A, %B %d, %Y"
TIME_DISPLAY_FORMAT: str = "%I:%M %p"

# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------
API_KEY_PREFIXES: tuple[str, ...] = ("Bearer ", "ApiKey ")
