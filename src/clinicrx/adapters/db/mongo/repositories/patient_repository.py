"""
MongoDB implementation of PatientRepository.
"""

import re
from datetime import datetime
from typing import List, Optional

from clinicrx.application.ports.repositories.patient_repo import PatientRepository
from clinicrx.domain.entities.patient import MedicalHistoryEntry, Patient
from clinicrx.domain.enums.clinic import Gender
from clinicrx.domain.errors import PatientNotFoundError
from clinicrx.domain.value_objects.mr_number import MRNumber

from ..models.patient_m import MedicalHistoryEntryMongo, PatientMongo
from .errors import persistence_errors, to_date, to_datetime


class MongoPatientRepository(PatientRepository):
    """MongoDB implementation of PatientRepository."""

    async def save(self, patient: Patient) -> Patient:
        """Save a patient to MongoDB."""
        with persistence_errors():
            existing = await PatientMongo.find_one(PatientMongo.patient_id == patient.patient_id)
            patient_mongo = self._domain_to_mongo(patient, existing)
            await patient_mongo.save()
        return self._mongo_to_domain(patient_mongo)

    async def find_by_id(self, patient_id: str) -> Optional[Patient]:
        with persistence_errors():
            patient_mongo = await PatientMongo.find_one(PatientMongo.patient_id == patient_id)
        return self._mongo_to_domain(patient_mongo) if patient_mongo else None

    async def find_by_mr_number(self, mr_number: str) -> Optional[Patient]:
        with persistence_errors():
            patient_mongo = await PatientMongo.find_one(PatientMongo.mr_number == mr_number)
        return self._mongo_to_domain(patient_mongo) if patient_mongo else None

    async def find_all(self, limit: int = 100, offset: int = 0) -> List[Patient]:
        with persistence_errors():
            patients_mongo = (
                await PatientMongo.find()
                .sort("-registration_date")
                .skip(offset)
                .limit(limit)
                .to_list()
            )
        return [self._mongo_to_domain(p) for p in patients_mongo]

    async def search(self, query: str, limit: int = 100, offset: int = 0) -> List[Patient]:
        pattern = re.escape(query)
        criteria = {
            "$or": [
                {"mr_number": {"$regex": pattern, "$options": "i"}},
                {"first_name": {"$regex": pattern, "$options": "i"}},
                {"last_name": {"$regex": pattern, "$options": "i"}},
                {"contact_number": {"$regex": pattern}},
            ]
        }
        with persistence_errors():
            patients_mongo = (
                await PatientMongo.find(criteria)
                .sort("-registration_date")
                .skip(offset)
                .limit(limit)
                .to_list()
            )
        return [self._mongo_to_domain(p) for p in patients_mongo]

    async def add_medical_history(self, patient_id: str, entry: MedicalHistoryEntry) -> Patient:
        with persistence_errors():
            patient_mongo = await PatientMongo.find_one(PatientMongo.patient_id == patient_id)
            if patient_mongo is None:
                raise PatientNotFoundError(patient_id)
            patient_mongo.medical_history.insert(0, self._entry_to_mongo(entry))
            patient_mongo.updated_at = datetime.utcnow()
            await patient_mongo.save()
        return self._mongo_to_domain(patient_mongo)

    @staticmethod
    def _entry_to_mongo(entry: MedicalHistoryEntry) -> MedicalHistoryEntryMongo:
        return MedicalHistoryEntryMongo(
            entry_id=entry.entry_id,
            date=to_datetime(entry.date),
            diagnosis=entry.diagnosis,
            notes=entry.notes,
            prescription_id=entry.prescription_id,
        )

    def _domain_to_mongo(self, patient: Patient, existing: Optional[PatientMongo]) -> PatientMongo:
        """Convert domain entity to MongoDB model, updating ``existing`` in place when given."""
        fields = dict(
            patient_id=patient.patient_id,
            mr_number=patient.mr_number.value,
            first_name=patient.first_name,
            last_name=patient.last_name,
            date_of_birth=to_datetime(patient.date_of_birth),
            gender=patient.gender.value,
            contact_number=patient.contact_number,
            email=patient.email,
            address=patient.address,
            registration_date=patient.registration_date,
            medical_history=[self._entry_to_mongo(e) for e in patient.medical_history],
        )
        if existing is None:
            return PatientMongo(**fields)
        for name, value in fields.items():
            setattr(existing, name, value)
        existing.updated_at = datetime.utcnow()
        return existing

    @staticmethod
    def _mongo_to_domain(patient_mongo: PatientMongo) -> Patient:
        """Convert MongoDB model to domain entity."""
        return Patient(
            patient_id=patient_mongo.patient_id,
            mr_number=MRNumber(patient_mongo.mr_number),
            first_name=patient_mongo.first_name,
            last_name=patient_mongo.last_name,
            date_of_birth=to_date(patient_mongo.date_of_birth),
            gender=Gender(patient_mongo.gender),
            contact_number=patient_mongo.contact_number,
            email=patient_mongo.email,
            address=patient_mongo.address,
            registration_date=patient_mongo.registration_date,
            medical_history=[
                MedicalHistoryEntry(
                    entry_id=e.entry_id,
                    date=to_date(e.date),
                    diagnosis=e.diagnosis,
                    notes=e.notes,
                    prescription_id=e.prescription_id,
                )
                for e in patient_mongo.medical_history
            ],
        )
