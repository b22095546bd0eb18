"""Verification defaults loaded from environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict

CLOCK_TOLERANCE_DEFAULT = 0


class EngineSettings(BaseSettings):
    """Default verification policy for a host process."""

    model_config = SettingsConfigDict(env_prefix="JWT_")

    clock_tolerance: float = CLOCK_TOLERANCE_DEFAULT
    require_expiration: bool = False
    allowed_algorithms: str = ""
    issuer: str = ""
    audience: str = ""

    def get_allowed_algorithm_list(self) -> list[str]:
        """Parse comma-separated allowed algorithms."""
        if not self.allowed_algorithms:
            return []
        return [a.strip() for a in self.allowed_algorithms.split(",") if a.strip()]
