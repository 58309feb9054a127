"""
Configuration management for Clinic-Rx application.

This module provides centralized configuration using Pydantic Settings
for environment-based configuration management.
"""

from typing import Dict, List, Optional

import os
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database configuration settings."""

    model_config = SettingsConfigDict(env_prefix="MONGO_")

    uri: str = Field(default="", description="MongoDB connection URI")
    db_name: str = Field(default="clinicrx", description="MongoDB database name")

    @field_validator("uri")
    @classmethod
    def validate_mongo_uri(cls, v: str) -> str:
        """Validate MongoDB URI format."""
        if v and not v.startswith(("mongodb://", "mongodb+srv://")):
            raise ValueError(
                "MongoDB URI must start with 'mongodb://' or 'mongodb+srv://'"
            )
        return v


class SecuritySettings(BaseSettings):
    """API key authentication settings."""

    model_config = SettingsConfigDict(env_prefix="SECURITY_")

    api_keys: str = Field(
        default="",
        description="Comma-separated key:user:role triples (role defaults to staff)",
    )


class CORSSettings(BaseSettings):
    """CORS configuration settings."""

    model_config = SettingsConfigDict(env_prefix="CORS_")

    allowed_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:8080"],
        description="Allowed CORS origins",
    )
    allowed_methods: List[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        description="Allowed HTTP methods",
    )
    allowed_headers: List[str] = Field(
        default=["*"], description="Allowed HTTP headers"
    )

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def parse_allowed_origins(cls, v):
        """Parse allowed origins from string or list."""
        if isinstance(v, str):
            # Handle JSON-like string format
            if v.startswith("[") and v.endswith("]"):
                import json

                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    return [v.strip()]
            return [o.strip() for o in v.split(",") if o.strip()]
        return v


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO", description="Logging level")
    format: str = Field(default="json", description="Log format (json or text)")

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate logging level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        if v.lower() not in ("json", "text"):
            raise ValueError("Log format must be 'json' or 'text'")
        return v.lower()


class TemplateSettings(BaseSettings):
    """Prescription header/footer template storage settings."""

    model_config = SettingsConfigDict(env_prefix="TEMPLATE_")

    store_path: str = Field(
        default="./storage/templates.json",
        description="JSON file backing the template key-value store",
    )
    header_key: str = Field(default="prescription_header", description="Key for the header overlay")
    footer_key: str = Field(default="prescription_footer", description="Key for the footer overlay")
    default_clinic_name: str = Field(default="Clinic", description="Clinic name used by the default header")


class UploadSettings(BaseSettings):
    """Logo upload validation settings."""

    model_config = SettingsConfigDict(env_prefix="UPLOAD_")

    logo_max_bytes: int = Field(default=2 * 1024 * 1024, description="Maximum logo size in bytes")
    logo_allowed_types: List[str] = Field(
        default=["image/jpeg", "image/png", "image/svg+xml"],
        description="Accepted logo MIME types",
    )

    @field_validator("logo_max_bytes")
    @classmethod
    def validate_max_bytes(cls, v: int) -> int:
        """Validate max logo size."""
        if v <= 0:
            raise ValueError("Logo size limit must be positive")
        return v


class RenderSettings(BaseSettings):
    """Drawing surface and composition settings."""

    model_config = SettingsConfigDict(env_prefix="RENDER_")

    canvas_width: int = Field(default=600, description="Default drawing surface width in px")
    canvas_height: int = Field(default=800, description="Default drawing surface height in px")
    stroke_width: int = Field(default=2, description="Pen width in px")
    image_fetch_timeout_seconds: float = Field(default=15.0, description="Timeout for remote image loads")
    image_allowed_hosts: str = Field(
        default="",
        description="Comma-separated hosts that http(s) image references may point at",
    )
    print_delay_ms: int = Field(default=500, description="Delay before the print dialog opens")
    font_regular_path: Optional[str] = Field(default=None, description="TrueType font for regular text")
    font_bold_path: Optional[str] = Field(default=None, description="TrueType font for bold text")
    font_italic_path: Optional[str] = Field(default=None, description="TrueType font for italic text")
    font_bold_italic_path: Optional[str] = Field(default=None, description="TrueType font for bold italic text")
    drawing_session_ttl_seconds: int = Field(default=1800, description="Idle drawing sessions are dropped after this long")
    drawing_max_sessions: int = Field(default=50, description="Live drawing sessions kept per process")

    @field_validator("canvas_width", "canvas_height")
    @classmethod
    def validate_canvas_size(cls, v: int) -> int:
        """Validate canvas dimensions."""
        if not 1 <= v <= 4000:
            raise ValueError("Canvas dimensions must be between 1 and 4000 px")
        return v

    @field_validator("print_delay_ms")
    @classmethod
    def validate_print_delay(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Print delay cannot be negative")
        return v

    @field_validator("drawing_session_ttl_seconds", "drawing_max_sessions")
    @classmethod
    def validate_session_limits(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Drawing session limits must be positive")
        return v

    def image_hosts(self) -> List[str]:
        """Allowed image hosts, lower-cased."""
        return [h.strip().lower() for h in self.image_allowed_hosts.split(",") if h.strip()]

    def font_paths(self) -> Dict[str, Optional[str]]:
        """Font files keyed by (bold, italic) style name."""
        return {
            "regular": self.font_regular_path,
            "bold": self.font_bold_path,
            "italic": self.font_italic_path,
            "bold_italic": self.font_bold_italic_path,
        }


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application settings
    app_name: str = Field(default="Clinic-Rx", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    app_env: str = Field(default="development", description="Application environment")
    debug: bool = Field(default=False, description="Debug mode")
    port: int = Field(default=8000, description="Application port")
    host: str = Field(default="0.0.0.0", description="Application host")

    # Sub-settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    template: TemplateSettings = Field(default_factory=TemplateSettings)
    upload: UploadSettings = Field(default_factory=UploadSettings)
    render: RenderSettings = Field(default_factory=RenderSettings)

    def __init__(self, **kwargs):
        super().__init__(**kwargs)

        # Override sub-settings with environment variables
        self.database = DatabaseSettings()
        self.security = SecuritySettings()
        self.cors = CORSSettings()
        self.logging = LoggingSettings()
        self.template = TemplateSettings()
        self.upload = UploadSettings()
        self.render = RenderSettings()

    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        """Validate application environment."""
        valid_envs = ["development", "staging", "production", "testing"]
        if v.lower() not in valid_envs:
            raise ValueError(f"App environment must be one of: {valid_envs}")
        return v.lower()

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port number."""
        if not 1 <= v <= 65535:
            raise ValueError("Port must be between 1 and 65535")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.app_env == "testing"


# Global settings instance (loaded after attempting to read .env)
_settings: Optional[Settings] = None


def _load_env_file_if_available() -> None:
    """Best-effort load of .env by searching current and parent directories.

    This helps in environments where the working directory isn't the backend folder
    and pydantic's env_file doesn't get resolved as expected.
    """
    from dotenv import load_dotenv

    cwd = Path(os.getcwd()).resolve()
    for parent in [cwd, *cwd.parents]:
        candidate = parent / ".env"
        if candidate.exists():
            # Do not override already-set environment variables
            load_dotenv(dotenv_path=str(candidate), override=False)
            break


def get_settings() -> Settings:
    """Get application settings instance (lazy-init with .env discovery)."""
    global _settings
    if _settings is None:
        _load_env_file_if_available()
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next access re-reads the environment."""
    global _settings
    _settings = None
