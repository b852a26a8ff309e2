from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional
from pathlib import Path

# Get the directory where the project root is located
BASE_DIR = Path(__file__).resolve().parent.parent

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding='utf-8',
        extra='ignore'
    )

    database_url: str
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # Student session cookies
    student_cookie_max_age_days: int = 30
    cookie_secure: bool = False

    # Access codes
    access_code_length: int = 6
    min_access_code_length: int = 4

    admin_email: Optional[str] = None
    cors_origins: List[str] = ["*"]

    log_level: str = "INFO"
    log_format: str = "text"

    @property
    def student_cookie_max_age(self) -> int:
        return self.student_cookie_max_age_days * 24 * 60 * 60

settings = Settings()
