"""Process-wide collaborators, built once and injected with Depends."""

from functools import lru_cache

from fastapi import Depends

from helpdesk.config import Settings, get_settings
from helpdesk.database import build_session_factory
from helpdesk.services.ai_service import GenerativeFallback
from helpdesk.services.flow_service import FlowDependencies
from helpdesk.services.llm import build_llm_provider
from helpdesk.services.persistence_service import PersistenceGateway
from helpdesk.services.session_state import SessionStateTracker


@lru_cache
def get_tracker() -> SessionStateTracker:
    settings = get_settings()
    return SessionStateTracker(
        ttl_seconds=settings.pending_session_ttl_seconds,
        max_entries=settings.pending_session_max_entries,
    )


@lru_cache
def get_gateway() -> PersistenceGateway:
    return PersistenceGateway(build_session_factory(get_settings()))


@lru_cache
def get_fallback() -> GenerativeFallback:
    settings = get_settings()
    return GenerativeFallback(build_llm_provider(settings), timeout_seconds=settings.llm_timeout_seconds)


def get_flow_dependencies(
    settings: Settings = Depends(get_settings),
    tracker: SessionStateTracker = Depends(get_tracker),
    gateway: PersistenceGateway = Depends(get_gateway),
    fallback: GenerativeFallback = Depends(get_fallback),
) -> FlowDependencies:
    return FlowDependencies(
        tracker=tracker,
        gateway=gateway,
        fallback=fallback,
        confidence_threshold=settings.fallback_confidence_threshold,
    )
