"""Configuration management for CW Reports."""

from pathlib import Path
from urllib.parse import urlencode

from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

YNAB_OAUTH_AUTHORIZE_URL = "https://app.ynab.com/oauth/authorize"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # YNAB OAuth application
    ynab_client_id: str = (
        "2af5bad4b3d684eed0003a8f64bb5524c94ea728b13f0a93a48526e2171ee027"
    )
    ynab_redirect_uri: str = "cw-reports://oauth"

    # Overrides the stored access token (e.g. a personal access token)
    ynab_access_token: str | None = None

    # Database path
    database_path: Path = Path.home() / ".cw_reports" / "cw_reports.db"

    def __init__(self, **kwargs):
        """Initialize settings and create database directory if needed."""
        super().__init__(**kwargs)
        self.database_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def oauth_authorize_url(self) -> str:
        """YNAB implicit-grant authorize URL that redirects back to the app."""
        params = {
            "client_id": self.ynab_client_id,
            "redirect_uri": self.ynab_redirect_uri,
            "response_type": "token",
            "scope": "read-only",
        }
        return f"{YNAB_OAUTH_AUTHORIZE_URL}?{urlencode(params, safe=':/')}"


def load_settings() -> Settings:
    """Load application settings from environment variables."""
    try:
        return Settings()
    except Exception as e:
        raise ConfigurationError(
            f"Failed to load settings. Check the YNAB_* and DATABASE_PATH "
            f"values in your environment or .env file.\n"
            f"Error: {e}"
        ) from e
