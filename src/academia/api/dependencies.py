"""FastAPI dependencies for dependency injection."""

from __future__ import annotations

from collections.abc import Generator  # noqa: TC003
from typing import Annotated

from fastapi import Depends

from academia.api.events import EventManager
from academia.enrollment import EnrollmentOrchestrator
from academia.promotion import EligibilityService, PromotionOrchestrator
from academia.store import SchoolStore

# Global SchoolStore instance (initialized on app startup)
_store: SchoolStore | None = None


def init_store(db_path: str = "academia.db") -> SchoolStore:
    """Initialize the global SchoolStore instance."""
    global _store  # noqa: PLW0603
    _store = SchoolStore(db_path)
    return _store


def close_store() -> None:
    """Close the global SchoolStore instance."""
    global _store  # noqa: PLW0603
    if _store is not None:
        _store.close()
        _store = None


def get_store() -> Generator[SchoolStore, None, None]:
    """Dependency that provides the SchoolStore instance."""
    if _store is None:
        raise RuntimeError("SchoolStore not initialized. Call init_store() first.")
    yield _store


# Type alias for dependency injection
StoreDep = Annotated[SchoolStore, Depends(get_store)]

# Global EventManager instance
_event_manager: EventManager | None = None


def init_event_manager() -> EventManager:
    """Initialize the global EventManager instance."""
    global _event_manager  # noqa: PLW0603
    _event_manager = EventManager()
    return _event_manager


def get_event_manager() -> Generator[EventManager, None, None]:
    """Dependency that provides the EventManager instance."""
    if _event_manager is None:
        raise RuntimeError("EventManager not initialized. Call init_event_manager() first.")
    yield _event_manager


# Type alias for dependency injection
EventManagerDep = Annotated[EventManager, Depends(get_event_manager)]

# Global orchestrators (initialized on app startup)
_enrollment_orchestrator: EnrollmentOrchestrator | None = None
_promotion_orchestrator: PromotionOrchestrator | None = None
_eligibility_service: EligibilityService | None = None


def init_orchestrators(
    enrollment: EnrollmentOrchestrator,
    promotion: PromotionOrchestrator,
    eligibility: EligibilityService,
) -> None:
    """Initialize the global orchestrator instances."""
    global _enrollment_orchestrator, _promotion_orchestrator, _eligibility_service  # noqa: PLW0603
    _enrollment_orchestrator = enrollment
    _promotion_orchestrator = promotion
    _eligibility_service = eligibility


def close_orchestrators() -> None:
    """Drop the global orchestrator instances."""
    global _enrollment_orchestrator, _promotion_orchestrator, _eligibility_service  # noqa: PLW0603
    _enrollment_orchestrator = None
    _promotion_orchestrator = None
    _eligibility_service = None


def get_enrollment_orchestrator() -> Generator[EnrollmentOrchestrator, None, None]:
    """Dependency that provides the EnrollmentOrchestrator instance."""
    if _enrollment_orchestrator is None:
        raise RuntimeError("Orchestrators not initialized. Call init_orchestrators() first.")
    yield _enrollment_orchestrator


def get_promotion_orchestrator() -> Generator[PromotionOrchestrator, None, None]:
    """Dependency that provides the PromotionOrchestrator instance."""
    if _promotion_orchestrator is None:
        raise RuntimeError("Orchestrators not initialized. Call init_orchestrators() first.")
    yield _promotion_orchestrator


def get_eligibility_service() -> Generator[EligibilityService, None, None]:
    """Dependency that provides the EligibilityService instance."""
    if _eligibility_service is None:
        raise RuntimeError("Orchestrators not initialized. Call init_orchestrators() first.")
    yield _eligibility_service


# Type aliases for dependency injection
EnrollmentOrchestratorDep = Annotated[
    EnrollmentOrchestrator, Depends(get_enrollment_orchestrator)
]
PromotionOrchestratorDep = Annotated[PromotionOrchestrator, Depends(get_promotion_orchestrator)]
EligibilityServiceDep = Annotated[EligibilityService, Depends(get_eligibility_service)]
