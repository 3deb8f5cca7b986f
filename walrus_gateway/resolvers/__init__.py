"""Subdomain resolution strategies and the ordered resolver."""
from .object_resolver import ObjectResolver
from .strategies import Base36Strategy, ResolutionStrategy, StaticOverrideStrategy, SuiNSStrategy

__all__ = [
    "ObjectResolver",
    "ResolutionStrategy",
    "StaticOverrideStrategy",
    "Base36Strategy",
    "SuiNSStrategy",
]
