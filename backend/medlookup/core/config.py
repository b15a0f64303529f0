from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central settings object.
    Deployments provide env vars; locally you can use backend/.env.
    """
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # CIMA (AEMPS) registry
    CIMA_BASE: str = "https://cima.aemps.es"

    # Secondary fetch path when the registry refuses the direct request (CORS in dev)
    CORS_PROXY_ENABLED: bool = True
    CORS_PROXY_TEMPLATE: str = "https://api.allorigins.win/raw?url={url}"

    # Timeouts
    JSON_TIMEOUT_SECONDS: float = 12.0
    HTML_TIMEOUT_SECONDS: float = 15.0

    LOG_LEVEL: str = "INFO"

    # Versioning
    APP_VERSION: str = "0.1.0"
    BUILD_ID: str = "dev"


# ✅ MUST EXIST: other modules import this
settings = Settings()
