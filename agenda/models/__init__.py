from agenda.models.tenant import Tenant
from agenda.models.user import User, UserRole, UserStatus
from agenda.models.client import Client
from agenda.models.service import Service, ServiceStatus
from agenda.models.appointment import Appointment, AppointmentState, RecurrencePattern
from agenda.models.appointment_service_line import AppointmentServiceLine
from agenda.models.working_hours import WorkingHours
from agenda.models.day_off import DayOff
from agenda.models.plan_limits import PlanLimits, PlanTier, UNLIMITED, DEFAULT_PLAN_LIMITS
from agenda.models.usage_counter import UsageCounter, period_key
