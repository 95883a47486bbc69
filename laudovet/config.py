from pathlib import Path

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


class LetterheadMargins(BaseModel):
    """Page margins (millimetres) reserved around the letterhead."""
    top: int = 30
    left: int = 15
    right: int = 15
    bottom: int = 20


class ClinicSettings(BaseModel):
    """Clinic identity and letterhead used in every report header."""
    clinic_name: str = ""
    clinic_address: str = ""
    veterinarian_name: str = ""
    crmv: str = ""

    # Letterhead asset as a data URL (image or document)
    letterhead_data: str | None = None
    letterhead_filename: str | None = None
    letterhead_margins_mm: LetterheadMargins = LetterheadMargins()

    @property
    def has_image_letterhead(self) -> bool:
        return bool(self.letterhead_data and self.letterhead_data.startswith("data:image"))


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # --- Local SQLite ---
    sqlite_db_path: Path = Path("/opt/laudovet/data/laudovet.db")

    # --- Reports ---
    default_language: str = "pt"
    default_exam_type: str = "ultrasound_abd"
    export_dir: Path = Path("/opt/laudovet/exports")
    letterhead_max_bytes: int = 10 * 1024 * 1024

    # --- Web interface ---
    web_host: str = "127.0.0.1"
    web_port: int = 8080

    @property
    def sqlite_url(self) -> str:
        return f"sqlite:///{self.sqlite_db_path}"


settings = Settings()
