"""Access to service settings from the active domain's ``[custom]`` config."""

from typing import Any

from protean.utils.globals import current_domain


def setting(name: str, default: Any = None) -> Any:
    custom = current_domain.config.get("custom") or {}
    value = custom.get(name, default)
    return default if value in (None, "") else value
