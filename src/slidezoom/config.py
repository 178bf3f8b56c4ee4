"""slidezoom configuration using pydantic-settings.

All configuration is strongly typed and supports environment variables
and .env files.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigError(Exception):
    """Raised when a configuration value is missing or invalid.

    Example:
        >>> Settings(_env_file=None, TILE_SIZE=0).require_valid_tiling()
        Traceback (most recent call last):
        ...
        ConfigError: TILE_SIZE must be positive, got 0. Set it in .env file or
        TILE_SIZE environment variable.
    """

    def __init__(self, problem: str, env_var: str) -> None:
        """Initialize configuration error.

        Args:
            problem: Human-readable description of the invalid value.
            env_var: Environment variable name to set.
        """
        self.problem = problem
        self.env_var = env_var
        message = f"{problem}. Set it in .env file or {env_var} environment variable."
        super().__init__(message)


class Settings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "console"  # "console" or "json"

    # Deep Zoom tiling
    TILE_SIZE: int = 254  # Tile edge length, excluding overlap
    OVERLAP: int = 1  # Border pixels added on interior tile edges
    LIMIT_BOUNDS: bool = False  # Restrict the pyramid to openslide.bounds-*

    # Tile rendering
    BACKGROUND_COLOR: str = "#ffffff"  # Fill behind transparent slide areas

    # Enumeration
    ENUMERATION_QUEUE_SIZE: int = 1  # Producer/consumer handoff slots

    def require_valid_tiling(self) -> tuple[int, int]:
        """Get (tile_size, overlap), raising ConfigError if either is invalid.

        Returns:
            The configured tile size and overlap.

        Raises:
            ConfigError: If TILE_SIZE is not positive or OVERLAP is negative.
        """
        if self.TILE_SIZE <= 0:
            raise ConfigError(f"TILE_SIZE must be positive, got {self.TILE_SIZE}", "TILE_SIZE")
        if self.OVERLAP < 0:
            raise ConfigError(f"OVERLAP must not be negative, got {self.OVERLAP}", "OVERLAP")
        return self.TILE_SIZE, self.OVERLAP


# Singleton instance for import convenience
settings = Settings()
