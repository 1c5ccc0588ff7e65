from typing import List, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parent.parent.parent / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Project Info
    PROJECT_NAME: str = Field(default="IT Asset Inventory & Credential Tracker (ITAM)")
    VERSION: str = Field(default="1.0.0")
    API_PREFIX: str = Field(default="/api")
    DEBUG: bool = Field(default=False)

    # Server Settings
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8000)

    # CORS Settings
    CORS_ORIGINS: List[str] = Field(default=["*"])
    CORS_CREDENTIALS: bool = Field(default=True)
    CORS_METHODS: List[str] = Field(default=["*"])
    CORS_HEADERS: List[str] = Field(default=["*"])

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_DIR: Path = Field(default=Path("logs"))
    LOG_TO_FILE: bool = Field(default=True)

    # Database Configuration
    DATABASE_URL: Optional[str] = Field(default=None)

    # MySQL Database Settings（DATABASE_URL 为空且配置了 MYSQL_HOST 时使用）
    MYSQL_USER: str = Field(default="root")
    MYSQL_PASSWORD: str = Field(default="")
    MYSQL_HOST: Optional[str] = Field(default=None)
    MYSQL_PORT: int = Field(default=3306)
    MYSQL_DB: str = Field(default="itam_db")

    # 认证协作方未提供身份时使用的占位操作人
    DEFAULT_ACTOR: str = Field(default="admin")
    DEFAULT_ROLE: str = Field(default="admin")

    # Activity Log
    ACTIVITY_LOG_LIMIT: int = Field(default=100)

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        if self.MYSQL_HOST:
            return (
                f"mysql+pymysql://{self.MYSQL_USER}:{self.MYSQL_PASSWORD}@{self.MYSQL_HOST}:{self.MYSQL_PORT}/{self.MYSQL_DB}?charset=utf8mb4"
            )
        return "sqlite:///./itam.db"

    @field_validator("CORS_ORIGINS", "CORS_METHODS", "CORS_HEADERS", mode="before")
    def assemble_cors_list(cls, v: str | List[str]) -> List[str]:
        """Parse CORS settings from comma-separated string or list."""
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    @field_validator("LOG_LEVEL")
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()


# Create settings instance
settings = Settings()
