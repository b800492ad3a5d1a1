from functools import lru_cache

from fastapi import Depends

from storegate.common.config import GuardConfig, StoreGateConfig, load_typed_config
from storegate.core.config import Settings, get_settings
from storegate.core.rbac.checker import PermissionChecker
from storegate.core.rbac.session import SessionState, get_session


@lru_cache
def get_app_config() -> StoreGateConfig:
    """YAML configuration named by ``STOREGATE_CONFIG_PATH``, or the defaults."""
    return load_typed_config(get_settings().config_path)


def get_session_state() -> SessionState:
    """Process-wide session dependency."""
    return get_session()


def get_checker(session: SessionState = Depends(get_session_state)) -> PermissionChecker:
    """One checker per request, bound to the snapshot published at request start."""
    return session.checker()


def get_guard_config(
    settings: Settings = Depends(get_settings),
    config: StoreGateConfig = Depends(get_app_config),
) -> GuardConfig:
    """Guard configuration with the environment's fallback path applied."""
    if settings.fallback_path:
        return GuardConfig(
            fallback_path=settings.fallback_path,
            placeholder_message=config.guard.placeholder_message,
        )
    return config.guard
