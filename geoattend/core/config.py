from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    APP_NAME: str = "geo-attendance"

    CORS_ORIGINS: str = "http://localhost:3000"

    APPWRITE_ENDPOINT: str = "https://cloud.appwrite.io/v1"
    APPWRITE_PROJECT_ID: str = ""
    APPWRITE_API_KEY: str = ""
    APPWRITE_TIMEOUT_SECONDS: float = 15.0

    # Appwrite caps list queries at 100 documents per call.
    USER_DIRECTORY_PAGE_LIMIT: int = 100
    USER_DIRECTORY_MAX_USERS: int = 5000
    ADMIN_LABEL: str = "admin"

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

settings = Settings()
