from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True)
class SearchSettings:
    """Fully resolved per-request search preferences."""

    safe_search_level: int
    engines: tuple[str, ...]
    colorscheme: str
    theme: str
    animation: str

    @classmethod
    def from_config(cls, config) -> "SearchSettings":
        """Synthesize settings from the server defaults."""
        return cls(
            safe_search_level=config.SAFE_SEARCH,
            engines=tuple(config.enabled_engines()),
            colorscheme=config.COLORSCHEME,
            theme=config.THEME,
            animation=config.ANIMATION,
        )

    @classmethod
    def from_preferences(cls, preferences: Any | None, config) -> "SearchSettings":
        """
        Build settings from a stored preference object, falling back to config.

        Args:
            preferences: Validated cookie preferences or None when absent/malformed
            config: Server configuration

        Returns:
            Fully populated SearchSettings
        """
        if preferences is None:
            return cls.from_config(config)

        return cls(
            safe_search_level=preferences.safe_search_level,
            engines=tuple(preferences.engines),
            colorscheme=preferences.colorscheme or config.COLORSCHEME,
            theme=preferences.theme or config.THEME,
            animation=preferences.animation or config.ANIMATION,
        )

    def with_safe_search_level(self, level: int) -> "SearchSettings":
        return replace(self, safe_search_level=level)
