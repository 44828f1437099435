import os
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

# Calculate the absolute path to the .env file at the project root.
_config_dir = os.path.dirname(os.path.abspath(__file__))
_backend_dir = os.path.dirname(os.path.dirname(_config_dir))
_project_root = os.path.dirname(_backend_dir)
_dotenv_path = os.path.join(_project_root, '.env')



class Settings(BaseSettings):
    DATABASE_URL: str
    DATABASE_ECHO: bool = False

    # JWT settings (tokens are issued by the identity provider)
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]

    # Release rules
    RELEASE_LEAD_DAYS: int = 5
    ISRC_COUNTRY_CODE: str = "UA"

    # S3-compatible object storage
    STORAGE_ENABLED: bool = False
    S3_ENDPOINT: str = "minio:9000"
    S3_ACCESS_KEY: str = "minioadmin"
    S3_SECRET_KEY: str = "minioadmin"
    S3_BUCKET: str = "releasehub-uploads"
    S3_SECURE: bool = False
    S3_REGION: Optional[str] = None
    UPLOAD_URL_EXPIRE_SECONDS: int = 3600

    model_config = SettingsConfigDict(
        env_file=_dotenv_path,
        env_file_encoding='utf-8',
        extra='ignore'
    )

settings = Settings()
