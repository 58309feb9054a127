"""FastAPI dependency providers."""

from functools import lru_cache
from typing import Annotated, Callable

from fastapi import Depends, Request

from ..adapters.db.mongo.repositories.patient_repository import MongoPatientRepository
from ..adapters.db.mongo.repositories.prescription_repository import (
    MongoPaymentRepository,
    MongoPrescriptionRepository,
)
from ..adapters.storage.local_template_store import LocalTemplateStore
from ..application.ports.repositories.patient_repo import PatientRepository
from ..application.ports.repositories.payment_repo import PaymentRepository
from ..application.ports.repositories.prescription_repo import PrescriptionRepository
from ..application.ports.services.template_store import TemplateStore
from ..application.services.template_service import TemplateService
from ..core.auth import AuthenticatedUser
from ..core.config import get_settings
from ..domain.enums.clinic import Role
from ..drawing.sessions import DrawingSessionRegistry
from ..rendering.composer import PrescriptionComposer
from ..rendering.fonts import FontBook
from ..rendering.images import ImageLoader
from .errors import ForbiddenError, UnauthorizedError


@lru_cache()
def get_patient_repository() -> PatientRepository:
    """Get patient repository instance."""
    return MongoPatientRepository()


@lru_cache()
def get_prescription_repository() -> PrescriptionRepository:
    return MongoPrescriptionRepository()


@lru_cache()
def get_payment_repository() -> PaymentRepository:
    return MongoPaymentRepository()


@lru_cache()
def get_template_store() -> TemplateStore:
    return LocalTemplateStore(get_settings().template.store_path)


@lru_cache()
def get_template_service() -> TemplateService:
    """Single template service per process so every subscriber sees every save."""
    settings = get_settings()
    return TemplateService(get_template_store(), settings.template, settings.upload)


@lru_cache()
def get_composer() -> PrescriptionComposer:
    """Composer wired to the template service so replaced logos drop out of its cache."""
    render = get_settings().render
    composer = PrescriptionComposer(
        loader=ImageLoader(
            timeout_seconds=render.image_fetch_timeout_seconds,
            allowed_hosts=render.image_hosts(),
        ),
        fonts=FontBook(render.font_paths()),
        print_delay_ms=render.print_delay_ms,
    )
    composer.attach(get_template_service())
    return composer


@lru_cache()
def get_drawing_registry() -> DrawingSessionRegistry:
    render = get_settings().render
    return DrawingSessionRegistry(
        ttl_seconds=render.drawing_session_ttl_seconds,
        max_sessions=render.drawing_max_sessions,
    )


def get_current_user(request: Request) -> AuthenticatedUser:
    """
    Get the authenticated user from request state.

    The authentication middleware must have run first (which it does by default).
    """
    user_id = getattr(request.state, "user_id", None)
    role = getattr(request.state, "role", None)
    if not user_id or role is None:
        raise UnauthorizedError("User not authenticated")
    return AuthenticatedUser(user_id=user_id, role=role)


def require_roles(*roles: Role) -> Callable[..., AuthenticatedUser]:
    """Dependency factory that only lets the given roles through."""
    allowed = set(roles)

    def checker(user: AuthenticatedUser = Depends(get_current_user)) -> AuthenticatedUser:
        if user.role not in allowed:
            raise ForbiddenError(
                f"Role '{user.role.value}' may not perform this action",
                {"allowed_roles": sorted(r.value for r in allowed)},
            )
        return user

    return checker


# Dependency annotations for FastAPI
PatientRepositoryDep = Annotated[PatientRepository, Depends(get_patient_repository)]
PrescriptionRepositoryDep = Annotated[PrescriptionRepository, Depends(get_prescription_repository)]
PaymentRepositoryDep = Annotated[PaymentRepository, Depends(get_payment_repository)]
TemplateServiceDep = Annotated[TemplateService, Depends(get_template_service)]
ComposerDep = Annotated[PrescriptionComposer, Depends(get_composer)]
DrawingRegistryDep = Annotated[DrawingSessionRegistry, Depends(get_drawing_registry)]
CurrentUserDep = Annotated[AuthenticatedUser, Depends(get_current_user)]
PrescriberDep = Annotated[AuthenticatedUser, Depends(require_roles(Role.DOCTOR, Role.ADMIN))]
TemplateEditorDep = Annotated[AuthenticatedUser, Depends(require_roles(Role.DOCTOR, Role.ADMIN))]
