from agenda.services.conflicts import ConflictService
from agenda.services.availability import AvailabilityService
from agenda.services.recurrence import RecurrenceService
from agenda.services.quotas import QuotaService
from agenda.services.calendar import CalendarService
from agenda.services.catalog import CatalogService
from agenda.services.appointments import AppointmentService
