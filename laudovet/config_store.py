"""Clinic settings stored in SQLite, falling back to defaults.

Usage:
    from laudovet.config_store import get_config_store

    clinic = get_config_store().get_clinic_settings()
"""

import json
import logging

from laudovet.config import ClinicSettings, LetterheadMargins
from laudovet.models import GlobalSetting

logger = logging.getLogger(__name__)

# Plain string keys stored in global_settings
_CLINIC_KEYS = (
    "clinic_name",
    "clinic_address",
    "veterinarian_name",
    "crmv",
    "letterhead_data",
    "letterhead_filename",
)

# Stored as JSON
_MARGINS_KEY = "letterhead_margins_mm"


class ConfigStore:
    def __init__(self, session_factory):
        self._session_factory = session_factory

    # ------------------------------------------------------------------
    # Clinic settings
    # ------------------------------------------------------------------

    def get_clinic_settings(self) -> ClinicSettings:
        with self._session_factory() as session:
            rows = {r.key: r.value for r in session.query(GlobalSetting).all()}
        return self._rows_to_clinic_settings(rows)

    def save_clinic_settings(self, clinic: ClinicSettings):
        data = {key: getattr(clinic, key) for key in _CLINIC_KEYS}
        data[_MARGINS_KEY] = clinic.letterhead_margins_mm.model_dump_json()
        with self._session_factory() as session:
            for key, value in data.items():
                row = session.query(GlobalSetting).filter_by(key=key).first()
                if row:
                    row.value = value
                else:
                    session.add(GlobalSetting(key=key, value=value))
            session.commit()
        logger.info("Saved clinic settings (letterhead: %s)", clinic.letterhead_filename or "none")

    def clear_letterhead(self):
        with self._session_factory() as session:
            for key in ("letterhead_data", "letterhead_filename"):
                row = session.query(GlobalSetting).filter_by(key=key).first()
                if row:
                    row.value = None
            session.commit()
        logger.info("Removed clinic letterhead")

    # ------------------------------------------------------------------
    # Seeding
    # ------------------------------------------------------------------

    def seed_defaults(self):
        with self._session_factory() as session:
            existing = session.query(GlobalSetting).filter(
                GlobalSetting.key.in_(_CLINIC_KEYS + (_MARGINS_KEY,))
            ).count()
            if existing > 0:
                return  # Already seeded

        logger.info("Seeding default clinic settings")
        self.save_clinic_settings(ClinicSettings())

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _rows_to_clinic_settings(rows: dict[str, str | None]) -> ClinicSettings:
        data = {key: rows[key] for key in _CLINIC_KEYS if rows.get(key) is not None}
        raw_margins = rows.get(_MARGINS_KEY)
        if raw_margins:
            try:
                data[_MARGINS_KEY] = LetterheadMargins(**json.loads(raw_margins))
            except (ValueError, TypeError) as e:
                logger.warning("Ignoring malformed letterhead margins %r: %s", raw_margins, e)
        return ClinicSettings(**data)


# Module-level singleton, initialized lazily after database.py sets up SessionLocal
_config_store: ConfigStore | None = None


def get_config_store() -> ConfigStore:
    global _config_store
    if _config_store is None:
        from laudovet.database import SessionLocal
        _config_store = ConfigStore(SessionLocal)
    return _config_store
