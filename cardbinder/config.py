from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "CardBinder"
    debug: bool = False

    database_url: str = "postgresql+asyncpg://localhost:5432/cardbinder"

    scryfall_api_url: str = "https://api.scryfall.com"
    scryfall_user_agent: str = "CardBinder/1.0"
    scryfall_timeout: float = 30.0

    # Retries apply to HTTP 429 only; other failures fall through the
    # resolver's strategy ladder instead of being retried.
    scryfall_max_retries: int = 3
    scryfall_backoff_seconds: float = 0.5

    # Import throttling (tuned empirically against Scryfall's ~10 req/s)
    import_batch_size: int = 10
    import_item_delay: float = 0.05
    import_batch_delay: float = 0.1

    # What to do with a row whose card cannot be resolved
    not_found_policy: Literal["placeholder", "drop"] = "placeholder"
    fallback_price: float = 0.0


settings = Settings()


# =============================================================================
# BINDER GEOMETRY
# =============================================================================

# Every page is a 3x3 grid
GRID_COLUMNS = 3
SLOTS_PER_PAGE = 9
