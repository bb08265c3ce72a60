from functools import lru_cache
from pathlib import Path
from typing import Optional
from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


ALLOWED_RATE_PROVIDERS = {"exchangerate-host", "latest-rates", "static"}
ALLOWED_STORE_BACKENDS = {"sqlite", "memory"}


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG,
    DATA_DIR, DB_FILENAME, EXCHANGE_RATE_PROVIDER, HTTP_TIMEOUT_SECONDS).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "Conversor de Moedas"
    debug: bool = True
    version: str = "0.1.0"

    # Key-value store backing the symbols cache and history
    store_backend: str = "sqlite"
    data_dir: Path = Path("data")
    db_filename: str = "fxwidget.sqlite3"
    db_path: Optional[Path] = None  # derived if not provided

    # Exchange rate provider
    # Allowed: 'exchangerate-host' (symbols + convert endpoints),
    # 'latest-rates' (rates-only endpoint, fixed symbol list), 'static' (offline table)
    exchange_rate_provider: str = "exchangerate-host"
    exchange_api_base_url: AnyHttpUrl = "https://api.exchangerate.host"
    latest_rates_base_url: AnyHttpUrl = "https://api.exchangerate-api.com/v4/latest"
    http_timeout_seconds: float = 10.0
    # One GET per operation unless explicitly raised
    http_retries: int = 0

    def init_post_load(self) -> None:
        """Finalize derived fields and ensure directories exist."""
        if self.exchange_rate_provider not in ALLOWED_RATE_PROVIDERS:
            raise ValueError(
                f"Unsupported exchange_rate_provider '{self.exchange_rate_provider}'. Allowed: {ALLOWED_RATE_PROVIDERS}"
            )
        if self.store_backend not in ALLOWED_STORE_BACKENDS:
            raise ValueError(
                f"Unsupported store_backend '{self.store_backend}'. Allowed: {ALLOWED_STORE_BACKENDS}"
            )
        if self.http_retries < 0:
            raise ValueError("http_retries must be >= 0")
        if self.store_backend == "sqlite":
            if self.db_path is None:
                self.db_path = self.data_dir / self.db_filename
            # Ensure persistence directory exists
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
