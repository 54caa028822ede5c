from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    """
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore')

    # --- Core App Settings ---
    FLASK_ENV: str = "production"
    SECRET_KEY: str = ""
    DEBUG: bool = False

    # --- Infrastructure ---
    MONGO_URI: str = "mongodb://localhost:27017/quizhub"

    # --- Identity ---
    # Header set by the upstream auth gateway once the session is validated
    IDENTITY_HEADER: str = "X-User-Id"

    # --- Listing ---
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # --- Attempts ---
    RECORD_ATTEMPTS: bool = True

    # --- Logging ---
    LOG_LEVEL: str = "INFO"


# Load settings
settings = Settings()

# Production readiness checks
if settings.FLASK_ENV == "production":
    if not settings.SECRET_KEY or settings.SECRET_KEY == "change-this-to-a-very-secret-key-in-production":
        raise ValueError("CRITICAL: SECRET_KEY is not set for production.")
    if settings.DEBUG:
        raise ValueError("CRITICAL: DEBUG mode must be disabled in production.")
if settings.DEFAULT_PAGE_SIZE > settings.MAX_PAGE_SIZE:
    raise ValueError("DEFAULT_PAGE_SIZE cannot exceed MAX_PAGE_SIZE.")
