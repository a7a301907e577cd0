"""Model profile management utilities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Optional

from chatAgent.errors import ConfigError


@dataclass(frozen=True, slots=True)
class ModelProfile:
    """Fixed token accounting constants of a chat model."""

    name: str
    max_tokens: int  # Absolute context ceiling (prompt + completion)
    tokens_per_message: int  # Framing overhead charged for every message
    tokens_per_name: int  # Extra overhead when a message carries a name (may be negative)
    encoding: str = "cl100k_base"  # tiktoken encoding family


class ModelProfileRegistry:
    """Central registry of the models a conversation may be started with."""

    def __init__(self, profiles: Optional[Iterable[ModelProfile]] = None) -> None:
        self._profiles: Dict[str, ModelProfile] = {}
        if profiles:
            for profile in profiles:
                self.register(profile)

    def register(self, profile: ModelProfile) -> None:
        """Store a profile under its model name."""

        self._profiles[profile.name] = profile

    def resolve(self, model_name: str) -> ModelProfile:
        """Return the profile for a model name.

        Raises:
            ConfigError: if the model is not known. This is surfaced before any
                conversation starts.
        """

        if model_name not in self._profiles:
            known = ", ".join(sorted(self._profiles)) or "none"
            raise ConfigError(f"Unknown model: {model_name} (known models: {known})")
        return self._profiles[model_name]

    def __contains__(self, model_name: object) -> bool:
        return model_name in self._profiles

    def __iter__(self) -> Iterator[ModelProfile]:
        return iter(self._profiles.values())


DEFAULT_PROFILES = (
    ModelProfile(name="gpt-4", max_tokens=8_192, tokens_per_message=3, tokens_per_name=1),
    ModelProfile(name="gpt-4-32k", max_tokens=32_768, tokens_per_message=3, tokens_per_name=1),
    ModelProfile(name="gpt-3.5-turbo", max_tokens=4_096, tokens_per_message=4, tokens_per_name=-1),
)


def build_default_registry() -> ModelProfileRegistry:
    """Instantiate the registry with the supported OpenAI chat models."""

    return ModelProfileRegistry(DEFAULT_PROFILES)
