"""
Application settings with Pydantic v2 validation.

Loads configuration from environment variables with sensible defaults.
Issuer identity (business name, SIRET, prefixes...) is not configuration:
it is user data stored alongside the documents (see IssuerProfile).
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Storage configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    backend: Literal["sqlite", "json"] = "sqlite"
    data_dir: Path = Path("data")
    db_name: str = "facturier.db"
    json_dir_name: str = "store"

    # SQLite settings
    pool_size: int = 2
    busy_timeout: int = 30000  # ms

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name

    @property
    def json_dir(self) -> Path:
        return self.data_dir / self.json_dir_name


class APISettings(BaseSettings):
    """API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    # Local-first: only the local user talks to the API
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = ["http://localhost:5173"]


class PdfSettings(BaseSettings):
    """PDF rendering configuration."""

    model_config = SettingsConfigDict(env_prefix="PDF_")

    footer_text: str = "Document généré par Facturier"
    logo_path: str | None = None
    # Unicode TTF embedded in documents; core latin-1 font when unset
    font_path: str | None = None


class DocumentSettings(BaseSettings):
    """Legal mentions printed on invoices."""

    model_config = SettingsConfigDict(env_prefix="DOCS_")

    recovery_costs_text: str = (
        "Indemnité forfaitaire pour frais de recouvrement : 40 EUR"
    )
    late_penalty_template: str = (
        "En cas de retard de paiement, une pénalité de {rate}% sera appliquée, "
        "conformément à l'article L.441-10 du Code de commerce."
    )


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Facturier"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Sub-settings
    storage: StorageSettings = Field(default_factory=StorageSettings)
    api: APISettings = Field(default_factory=APISettings)
    pdf: PdfSettings = Field(default_factory=PdfSettings)
    documents: DocumentSettings = Field(default_factory=DocumentSettings)

    @field_validator("storage", mode="before")
    @classmethod
    def ensure_data_dir(cls, v: Any) -> StorageSettings:
        if isinstance(v, dict):
            settings = StorageSettings(**v)
        else:
            settings = v or StorageSettings()
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        return settings


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
