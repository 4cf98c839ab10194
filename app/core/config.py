from typing import Optional

from pydantic_settings import BaseSettings

from app.schemas.sync import SyncOptions


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./printshop.db"

    # Printful API connection
    PRINTFUL_API_KEY: str = ""
    PRINTFUL_API_BASE_URL: str = "https://api.printful.com"
    PRINTFUL_REQUEST_TIMEOUT: float = 30.0

    # Admin routes
    ADMIN_API_TOKEN: str = ""

    # Snipcart webhooks
    SNIPCART_SECRET_KEY: str = ""
    SNIPCART_API_BASE_URL: str = "https://app.snipcart.com"

    # Serverless platform markers
    NETLIFY: str = ""
    VERCEL: str = ""

    # Sync tuning, None means "pick the default for this environment"
    SYNC_MAX_PRODUCTS: Optional[int] = None
    SYNC_TIMEOUT_SECONDS: Optional[float] = None
    SYNC_BATCH_SIZE: Optional[int] = None
    SYNC_RETRY_ATTEMPTS: Optional[int] = None
    SYNC_BATCH_TIMEOUT_SECONDS: float = 60.0
    SYNC_MAX_DELETIONS: int = 10
    SYNC_CLEANUP_MARGIN_SECONDS: float = 30.0
    SYNC_STALE_AFTER_MINUTES: int = 10

    # Circuit breaker around Printful calls
    CIRCUIT_FAILURE_THRESHOLD: int = 3
    CIRCUIT_CALL_TIMEOUT_SECONDS: float = 30.0
    CIRCUIT_RESET_SECONDS: float = 120.0

    # Static product enhancements
    ENHANCEMENTS_FILE: str = "app/data/product_enhancements.json"

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def is_serverless(self) -> bool:
        return self.NETLIFY.lower() == "true" or self.VERCEL == "1"

    def sync_options(self, **overrides) -> SyncOptions:
        serverless = self.is_serverless
        options = {
            "max_products": self.SYNC_MAX_PRODUCTS if self.SYNC_MAX_PRODUCTS is not None else (50 if serverless else 200),
            "timeout": (
                self.SYNC_TIMEOUT_SECONDS if self.SYNC_TIMEOUT_SECONDS is not None else (7 * 60 if serverless else 15 * 60)
            ),
            "batch_size": self.SYNC_BATCH_SIZE if self.SYNC_BATCH_SIZE is not None else (3 if serverless else 5),
            "retry_attempts": (
                self.SYNC_RETRY_ATTEMPTS if self.SYNC_RETRY_ATTEMPTS is not None else (1 if serverless else 2)
            ),
            "batch_timeout": self.SYNC_BATCH_TIMEOUT_SECONDS,
            "max_deletions": self.SYNC_MAX_DELETIONS,
            "cleanup_margin": self.SYNC_CLEANUP_MARGIN_SECONDS,
        }
        options.update({key: value for key, value in overrides.items() if value is not None})
        return SyncOptions(**options)


settings = Settings()
