"""Settings for the Notas Parser.

Every field can be overridden with an environment variable carrying the
``NOTAS_`` prefix, e.g. ``NOTAS_UPLOADS_DIR=public``.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ExtractorSettings(BaseSettings):
    """Tunables for document resolution, extraction heuristics and logging."""

    model_config = SettingsConfigDict(
        env_prefix="NOTAS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage
    uploads_dir: str = Field(
        default=".",
        description="Base directory that document locations are resolved against",
    )
    record_store_path: str = Field(
        default="data/db.json",
        description="JSON file that receives the extracted records",
    )

    # Extraction heuristics
    installment_slots: int = Field(
        default=3,
        ge=1,
        description="Number of vencimentoN/valorN column pairs to read",
    )
    installment_tolerance: float = Field(
        default=0.01,
        ge=0,
        description="Values closer than this are the same installment amount",
    )
    pdf_candidate_lines: int = Field(
        default=5,
        ge=0,
        description="Maximum number of PDF lines taken as product candidates",
    )
    pdf_name_max_length: int = Field(
        default=60,
        ge=1,
        description="Product names scraped from PDFs are truncated to this length",
    )
    unknown_supplier: str = Field(
        default="Fornecedor desconhecido",
        description="Supplier name used when none can be recovered",
    )
    default_product_name: str = Field(
        default="Item CSV",
        description="Product name used when a row has neither description nor code",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level used by the CLI",
    )


def get_settings() -> ExtractorSettings:
    """Factory function to get settings instance.

    Returns:
        Configured ExtractorSettings instance
    """
    return ExtractorSettings()
