from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import List, Optional

class Settings(BaseSettings):
    """
    Settings for the TutorHub API.

    Do not modify this file to change a value for your machine.
    Create a .env file in the root directory of the project instead and
    override the settings you need there, for example:
    - USE_REDIS=True
    - HTTPS_ENABLED=False

    The secret key and OIDC client secret are sensitive and should never be
    pushed to GitHub, so in production they must come from environment
    variables.

    SUMMARY:
    - Override settings (if needed) using a .env file
    - Never push the .env file to GitHub (it should be in .gitignore)
    - SECRET_KEY must be set when LOCAL=False
    """

    # Application settings
    app_name: str = "TutorHub API"
    app_version: str = "0.1.0"
    app_host: str = "0.0.0.0"
    app_port: int = 8000

    # Local vs production settings
    local: bool = True # Default to local development

    # Session cookie signing
    secret_key: str = "change-me"

    # Logs settings
    logs_dir: str = "logs"

    # Database settings
    db_url: str = "sqlite:///tutorhub.db" # Default, for local development

    # Redis settings
    use_redis: bool = False # Store auth sessions in Redis instead of the sessions table
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: Optional[str] = None

    # Session settings
    session_expire_minutes: int = 60 * 24 * 7
    https_enabled: bool = True

    # CORS
    cors_origins: List[str] = ["http://localhost:5173"]

    # Rate limiting
    rate_limit_enabled: bool = True
    login_rate_limit: str = "10/minute"

    # Demo accounts accepted by the login endpoint
    demo_student_email: str = "student@tutorhub.com"
    demo_student_password: str = "password123"
    demo_admin_email: str = "admin@tutorhub.com"
    demo_admin_password: str = "admin123"

    # External identity provider (OpenID Connect). Disabled unless a client id is set.
    oidc_client_id: Optional[str] = None
    oidc_client_secret: Optional[str] = None
    oidc_server_metadata_url: Optional[str] = None
    oidc_redirect_uri: str = "http://localhost:8000/api/auth/oidc/callback"

    # Load settings from .env file
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def oidc_enabled(self) -> bool:
        return bool(self.oidc_client_id and self.oidc_server_metadata_url)

@lru_cache() # Cache settings to avoid reading .env file multiple times
def get_settings():
    """
    Use this function as a dependency to get the settings object.
    Dependency injection will make it easier to test endpoints with different settings, simply inject a different settings object.
    """
    return Settings()

def validate_runtime_config(settings: Settings) -> None:
    if not settings.local and settings.secret_key == "change-me":
        raise RuntimeError("SECRET_KEY must be set when LOCAL is False.")
