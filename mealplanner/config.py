"""Configuration management for mealplanner."""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=("../.env", ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "info"

    # Spoonacular recipe catalog
    spoonacular_api_key: str = ""
    spoonacular_base_url: str = "https://api.spoonacular.com"
    spoonacular_rate_limit_ms: int = 1000  # 1 req/sec or the API starts rejecting
    spoonacular_page_size: int = 12

    # Open Food Facts (no key, just a polite User-Agent)
    open_food_facts_base_url: str = "https://world.openfoodfacts.org"
    open_food_facts_user_agent: str = "mealplanner/0.1.0 (meal planning engine)"
    open_food_facts_page_size: int = 5
    open_food_facts_rate_limit_ms: int = 1000

    http_timeout: float = 30.0

    # SQLite file holding the saved recipes, meal plans and grocery lists
    store_db: str = "./data/mealplanner.db"

    @property
    def spoonacular_min_interval(self) -> float:
        """Minimum seconds between two catalog dispatches."""
        return self.spoonacular_rate_limit_ms / 1000

    @property
    def open_food_facts_min_interval(self) -> float:
        return self.open_food_facts_rate_limit_ms / 1000


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
