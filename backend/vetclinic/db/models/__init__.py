# backend/vetclinic/db/models/__init__.py

from vetclinic.db.models.user import User, UserRole
from vetclinic.db.models.owner import Owner
from vetclinic.db.models.pet import Pet
from vetclinic.db.models.vet import Vet
from vetclinic.db.models.treatment import Treatment
from vetclinic.db.models.appointment import Appointment, AppointmentStatus
from vetclinic.db.models.appointment_treatment import AppointmentTreatment
from vetclinic.db.models.vaccine import Vaccine
from vetclinic.db.models.review import Review
