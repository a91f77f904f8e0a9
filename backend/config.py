"""Centralized configuration — all env vars in one place."""

import os

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/109.0.0.0 Safari/537.36"
)


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        self.cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
        self.git_sha: str = os.getenv("GIT_SHA", "unknown")
        self.environment: str = os.getenv("ENVIRONMENT", "local")

        # Scraped site
        self.base_url: str = os.getenv("KOMIK_BASE_URL", "https://komikcast.li").rstrip("/")
        self.user_agent: str = os.getenv("KOMIK_USER_AGENT", DEFAULT_USER_AGENT)
        self.timeout_seconds: float = float(os.getenv("KOMIK_TIMEOUT_SECONDS", "15"))

        # Response cache (0 disables the size cap / the background sweep)
        self.cache_ttl_seconds: float = float(os.getenv("CACHE_TTL_SECONDS", "300"))
        self.cache_max_entries: int = int(os.getenv("CACHE_MAX_ENTRIES", "0"))
        self.cache_sweep_seconds: float = float(os.getenv("CACHE_SWEEP_SECONDS", "0"))

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def validate(self) -> list[str]:
        """Return a list of problems with the loaded values."""
        problems = []
        if not self.base_url.startswith(("http://", "https://")):
            problems.append(f"KOMIK_BASE_URL must be an http(s) URL, got {self.base_url!r}")
        if self.cache_ttl_seconds <= 0:
            problems.append("CACHE_TTL_SECONDS must be positive")
        if self.cache_max_entries < 0:
            problems.append("CACHE_MAX_ENTRIES must be >= 0")
        return problems


settings = Settings()
