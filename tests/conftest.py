"""
Shared fixtures: in-memory repositories, a file-backed template service in a
temp directory and a TestClient with every external dependency overridden.
"""

import base64
import io
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from clinicrx.adapters.storage.local_template_store import LocalTemplateStore
from clinicrx.application.ports.repositories.patient_repo import PatientRepository
from clinicrx.application.ports.repositories.payment_repo import PaymentRepository
from clinicrx.application.ports.repositories.prescription_repo import PrescriptionRepository
from clinicrx.application.services.template_service import TemplateService
from clinicrx.core.auth import reset_auth_service
from clinicrx.core.config import reset_settings
from clinicrx.domain.entities.patient import MedicalHistoryEntry, Patient
from clinicrx.domain.entities.prescription import Payment, Prescription
from clinicrx.domain.enums.clinic import PaymentStatus
from clinicrx.domain.errors import PatientNotFoundError, PrescriptionNotFoundError
from clinicrx.drawing.sessions import DrawingSessionRegistry
from clinicrx.rendering.composer import PrescriptionComposer
from clinicrx.rendering.images import ImageLoader

API_KEYS = "doc-key:dr-house:doctor,staff-key:front-desk:staff,admin-key:admin-1:admin"
DOCTOR = {"X-API-Key": "doc-key"}
STAFF = {"X-API-Key": "staff-key"}
ADMIN = {"Authorization": "Bearer admin-key"}

# decodes as base64 but is not an image
BROKEN_IMAGE = "data:image/png;base64,bm90IGFuIGltYWdl"
LOGO_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="40" height="40">'
    '<rect width="40" height="40" fill="#0a0"/></svg>'
)


# -----------------------------------------------------------------------------
# Image helpers
# -----------------------------------------------------------------------------


def png_bytes(size=(600, 800), color=(255, 255, 255)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


def png_data_url(size=(600, 800), color=(255, 255, 255)) -> str:
    return "data:image/png;base64," + base64.b64encode(png_bytes(size, color)).decode("ascii")


# -----------------------------------------------------------------------------
# In-memory repositories
# -----------------------------------------------------------------------------


class InMemoryPatientRepository(PatientRepository):
    def __init__(self):
        self.patients: Dict[str, Patient] = {}

    async def save(self, patient: Patient) -> Patient:
        self.patients[patient.patient_id] = patient
        return patient

    async def find_by_id(self, patient_id: str) -> Optional[Patient]:
        return self.patients.get(patient_id)

    async def find_by_mr_number(self, mr_number: str) -> Optional[Patient]:
        return next((p for p in self.patients.values() if str(p.mr_number) == mr_number), None)

    async def find_all(self, limit: int = 100, offset: int = 0) -> List[Patient]:
        ordered = sorted(self.patients.values(), key=lambda p: p.registration_date, reverse=True)
        return ordered[offset:offset + limit]

    async def search(self, query: str, limit: int = 100, offset: int = 0) -> List[Patient]:
        found = [p for p in self.patients.values() if p.matches(query)]
        found.sort(key=lambda p: p.registration_date, reverse=True)
        return found[offset:offset + limit]

    async def add_medical_history(self, patient_id: str, entry: MedicalHistoryEntry) -> Patient:
        patient = self.patients.get(patient_id)
        if patient is None:
            raise PatientNotFoundError(patient_id)
        patient.add_medical_history(entry)
        return patient


class InMemoryPrescriptionRepository(PrescriptionRepository):
    def __init__(self):
        self.prescriptions: Dict[str, Prescription] = {}

    async def save(self, prescription: Prescription) -> Prescription:
        self.prescriptions[prescription.prescription_id] = prescription
        return prescription

    async def find_by_id(self, prescription_id: str) -> Optional[Prescription]:
        return self.prescriptions.get(prescription_id)

    async def find_by_patient_id(self, patient_id: str) -> List[Prescription]:
        found = [p for p in self.prescriptions.values() if p.patient_id == patient_id]
        return sorted(found, key=lambda p: p.created_at, reverse=True)

    async def find_all(self, limit: int = 100, offset: int = 0) -> List[Prescription]:
        ordered = sorted(self.prescriptions.values(), key=lambda p: p.created_at, reverse=True)
        return ordered[offset:offset + limit]

    async def delete(self, prescription_id: str) -> bool:
        return self.prescriptions.pop(prescription_id, None) is not None

    async def update_payment_status(self, prescription_id: str, status: PaymentStatus) -> None:
        prescription = self.prescriptions.get(prescription_id)
        if prescription is None:
            raise PrescriptionNotFoundError(prescription_id)
        prescription.payment_status = status


class InMemoryPaymentRepository(PaymentRepository):
    def __init__(self):
        self.payments: List[Payment] = []

    async def save(self, payment: Payment) -> Payment:
        self.payments.append(payment)
        return payment

    async def find_by_patient_id(self, patient_id: str) -> List[Payment]:
        return [p for p in self.payments if p.patient_id == patient_id]

    async def find_by_prescription_id(self, prescription_id: str) -> List[Payment]:
        return [p for p in self.payments if p.prescription_id == prescription_id]


# -----------------------------------------------------------------------------
# Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def test_environment(monkeypatch, tmp_path):
    """Isolated settings and API keys for every test."""
    monkeypatch.setenv("APP_ENV", "testing")
    monkeypatch.setenv("SECURITY_API_KEYS", API_KEYS)
    monkeypatch.setenv("TEMPLATE_STORE_PATH", str(tmp_path / "templates.json"))
    monkeypatch.delenv("MONGO_URI", raising=False)
    reset_settings()
    reset_auth_service()
    yield
    reset_settings()
    reset_auth_service()


@pytest.fixture
def patient_repo():
    return InMemoryPatientRepository()


@pytest.fixture
def prescription_repo():
    return InMemoryPrescriptionRepository()


@pytest.fixture
def payment_repo():
    return InMemoryPaymentRepository()


@pytest.fixture
def template_store(tmp_path):
    return LocalTemplateStore(str(tmp_path / "templates.json"))


@pytest.fixture
def template_service(template_store):
    return TemplateService(template_store)


@pytest.fixture
def composer(template_service):
    composer = PrescriptionComposer(ImageLoader(timeout_seconds=2))
    composer.attach(template_service)
    return composer


@pytest.fixture
def drawing_registry():
    return DrawingSessionRegistry()


@pytest.fixture
def client(patient_repo, prescription_repo, payment_repo, template_service, composer, drawing_registry):
    """TestClient with repositories, templates, composer and drawings replaced by fakes."""
    from clinicrx.api import deps
    from clinicrx.app import app

    app.dependency_overrides[deps.get_patient_repository] = lambda: patient_repo
    app.dependency_overrides[deps.get_prescription_repository] = lambda: prescription_repo
    app.dependency_overrides[deps.get_payment_repository] = lambda: payment_repo
    app.dependency_overrides[deps.get_template_service] = lambda: template_service
    app.dependency_overrides[deps.get_composer] = lambda: composer
    app.dependency_overrides[deps.get_drawing_registry] = lambda: drawing_registry
    yield TestClient(app)
    app.dependency_overrides.clear()
