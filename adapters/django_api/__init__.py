"""
Innkeep Django HTTP adapter.
Thin framework glue over core/http_api handlers.
"""

from adapters.django_api.wiring import (
    SYSTEM_ACTOR_ID,
    build_dependencies,
    load_pricing_settings,
    reset_dependencies,
)

__all__ = [
    "SYSTEM_ACTOR_ID",
    "build_dependencies",
    "load_pricing_settings",
    "reset_dependencies",
]
