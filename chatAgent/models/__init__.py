"""Model registry exports."""

from .registry import DEFAULT_PROFILES, ModelProfile, ModelProfileRegistry, build_default_registry

__all__ = ["DEFAULT_PROFILES", "ModelProfile", "ModelProfileRegistry", "build_default_registry"]
