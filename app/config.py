from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime knobs for the parsing service. Override via RESUME_PARSER_* env vars."""

    model_config = SettingsConfigDict(
        env_prefix="RESUME_PARSER_",
        env_file=".env",
        extra="ignore",
    )

    app_name: str = "Resume Structurer"
    log_level: str = "INFO"

    # OCR quality gate (decided by the orchestrator, not the extractors)
    min_text_length_for_ocr: int = 600
    non_ascii_ratio_threshold: float = 0.2

    # Subsection divider: gap multiple of the modal line pitch that opens a new entry
    subsection_gap_multiplier: float = 1.4

    # Optional semantic section corrector
    semantic_min_text_length: int = 500
    semantic_validation_threshold: float = 0.6
    semantic_override_threshold: float = 0.7

    # pdfplumber character clustering into rows
    pdf_line_y_tolerance: float = 3.0


@lru_cache()
def get_settings() -> Settings:
    return Settings()
