"""Module: seed_data."""

import random
import string
from datetime import datetime, timedelta
from decimal import Decimal

from faker import Faker
from sqlalchemy import func, select

from vetclinic.core.config import settings
from vetclinic.core.identity import create_identity, find_by_username
from vetclinic.db.init_db import init_db
from vetclinic.db.models.appointment import Appointment, AppointmentStatus
from vetclinic.db.models.appointment_treatment import AppointmentTreatment
from vetclinic.db.models.owner import Owner
from vetclinic.db.models.pet import Pet
from vetclinic.db.models.treatment import Treatment
from vetclinic.db.models.user import ROLE_ADMIN, ROLE_STANDARD
from vetclinic.db.models.vaccine import Vaccine
from vetclinic.db.models.vet import Vet
from vetclinic.db.session import SessionLocal

fake = Faker()

VETS = [
    ("Gregory", "House", 20),
    ("James", "Wilson", 15),
    ("Lisa", "Cuddy", 18),
]

TREATMENTS = [
    ("Rabies Vaccine", Decimal("25.00")),
    ("General Surgery", Decimal("150.00")),
    ("General Checkup", Decimal("50.00")),
]

SPECIES = ["Dog", "Cat", "Rabbit", "Parrot"]
DOG_VAX = ["C5", "C3", "Rabies"]
CAT_VAX = ["F3", "FIV", "Rabies"]


# Shared helpers used by multiple seed builders.
def generate_password(length: int = 12) -> str:
    chars = string.ascii_letters + string.digits
    return "".join(random.choice(chars) for _ in range(length))


def generate_mobile() -> str:
    return "555-" + "".join(random.choice(string.digits) for _ in range(4))


def seed_admin(session) -> bool:
    # The administrator is ensured on every run; business data only once.
    if find_by_username(session, settings.seed_admin_username) is not None:
        return False
    create_identity(
        session,
        settings.seed_admin_username,
        settings.seed_admin_email,
        settings.seed_admin_password,
        (ROLE_ADMIN,),
    )
    session.commit()
    return True


def seed_vets(session) -> list[Vet]:
    vets = [Vet(first_name=f, last_name=l, years_of_experience=y) for f, l, y in VETS]
    session.add_all(vets)
    session.commit()
    return vets


def seed_treatments(session) -> list[Treatment]:
    treatments = [Treatment(name=name, cost=cost) for name, cost in TREATMENTS]
    session.add_all(treatments)
    session.commit()
    return treatments


def seed_owners_and_pets(session, n: int = 5) -> tuple[list[Owner], dict[str, str]]:
    # Every seeded owner can log in; passwords are returned for the console summary.
    owners: list[Owner] = []
    credentials: dict[str, str] = {}
    for _ in range(n):
        first_name = fake.first_name()
        last_name = fake.last_name()
        username = fake.unique.user_name()
        email = fake.unique.email()
        password = generate_password()

        user = create_identity(session, username, email, password, (ROLE_STANDARD,))
        owner = Owner(
            first_name=first_name,
            last_name=last_name,
            email=email.lower(),
            phone_number=generate_mobile(),
            user_id=user.user_id,
        )
        owner.pets = [
            Pet(name=fake.first_name(), species=random.choice(SPECIES), age=random.randint(0, 15))
            for _ in range(random.randint(1, 2))
        ]
        session.add(owner)
        owners.append(owner)
        credentials[username] = password

    session.commit()
    return owners, credentials


def seed_appointments(session, pets: list[Pet], vets: list[Vet], treatments: list[Treatment]) -> int:
    now = datetime.utcnow().replace(second=0, microsecond=0)
    count = 0
    for pet in pets:
        upcoming = Appointment(
            pet_id=pet.pet_id,
            vet_id=random.choice(vets).vet_id,
            scheduled_at=now + timedelta(days=random.randint(1, 14)),
            description="Routine checkup",
            status=AppointmentStatus.SCHEDULED.value,
        )
        past = Appointment(
            pet_id=pet.pet_id,
            vet_id=random.choice(vets).vet_id,
            scheduled_at=now - timedelta(days=random.randint(5, 60)),
            description="Vaccination visit",
            status=AppointmentStatus.COMPLETED.value,
            diagnosis="Healthy.",
        )
        past.treatment_links = [
            AppointmentTreatment(treatment_id=t.treatment_id)
            for t in random.sample(treatments, k=2)
        ]
        session.add_all([upcoming, past])
        count += 2
    session.commit()
    return count


def seed_vaccines(session, pets: list[Pet]) -> int:
    count = 0
    for pet in pets:
        names = DOG_VAX if pet.species == "Dog" else CAT_VAX if pet.species == "Cat" else ["Rabies"]
        administered = datetime.utcnow() - timedelta(days=random.randint(30, 300))
        session.add(Vaccine(
            pet_id=pet.pet_id,
            name=random.choice(names),
            date_administered=administered,
            expiry_date=administered + timedelta(days=365),
        ))
        count += 1
    session.commit()
    return count


def seed(session, owners_n: int = 5) -> dict:
    """Seed a development database. Safe to run repeatedly."""
    summary = {"admin_created": seed_admin(session), "seeded": False}

    # If owners exist the business data was seeded before.
    if session.execute(select(func.count()).select_from(Owner)).scalar_one():
        return summary

    vets = seed_vets(session)
    treatments = seed_treatments(session)
    owners, credentials = seed_owners_and_pets(session, owners_n)
    pets = [pet for owner in owners for pet in owner.pets]

    summary.update(
        seeded=True,
        vets=len(vets),
        treatments=len(treatments),
        owners=len(owners),
        pets=len(pets),
        appointments=seed_appointments(session, pets, vets, treatments),
        vaccines=seed_vaccines(session, pets),
        credentials=credentials,
    )
    return summary


if __name__ == "__main__":
    # python -m vetclinic.scripts.seed_data
    init_db()
    session = SessionLocal()
    try:
        print("Seeding vet clinic data...")
        result = seed(session)
        if not result["seeded"]:
            print("Business data already present; only the administrator was checked.")
        else:
            print(
                f"Done. vets={result['vets']}, owners={result['owners']}, pets={result['pets']}, "
                f"appointments={result['appointments']}, vaccines={result['vaccines']}, "
                f"treatments={result['treatments']}"
            )
            for username, password in result["credentials"].items():
                print(f"  {username} / {password}")
        if result["admin_created"]:
            print(f"Administrator created: {settings.seed_admin_username}")
    finally:
        session.close()
