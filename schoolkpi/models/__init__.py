from .school import School
from .job_type import JobType
from .user import User, Role
from .kpi import KPI, SchoolKpiWeight
from .evidence import EvidenceItem
from .submission import EvidenceSubmission, SubmissionStatus
from .notification import Notification, NotificationType
# base and mixins are imported by the above as needed
