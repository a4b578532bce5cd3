# src/vehicle_registrations/utils/config.py
"""
Environment-driven settings for locating the monthly registration extracts,
plus the typed analysis tunables used by aggregation and forecasting.
"""

import os
from pathlib import Path
from typing import Dict

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env from project root
BASE_DIR = Path(__file__).resolve().parents[3]
load_dotenv(BASE_DIR / ".env")

DEFAULT_MONTH_FILES = (
    "4:2W_April_2025.csv,"
    "5:2W_May_2025.csv,"
    "6:2W_June_2025.csv,"
    "7:2W_July_2025.csv"
)


def parse_month_files(raw: str) -> Dict[int, str]:
    """'4:a.csv,5:b.csv' -> {4: 'a.csv', 5: 'b.csv'}"""
    files: Dict[int, str] = {}
    for item in raw.split(","):
        item = item.strip()
        if not item or ":" not in item:
            continue
        month, filename = item.split(":", 1)
        files[int(month.strip())] = filename.strip()
    return files


class Config:
    DATA_DIR = Path(os.getenv("DATA_DIR", BASE_DIR / "data"))
    DATA_YEAR = int(os.getenv("DATA_YEAR", "2025"))
    MONTH_FILES = parse_month_files(os.getenv("MONTH_FILES", DEFAULT_MONTH_FILES))

    def month_path(self, month: int) -> Path:
        return self.DATA_DIR / self.MONTH_FILES[month]

    def __repr__(self):
        return f"<Config data_dir={self.DATA_DIR} months={sorted(self.MONTH_FILES)}>"


class AnalysisSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="VR_", env_file=BASE_DIR / ".env", env_ignore_empty=True, extra="ignore"
    )

    # Breakdown tables
    min_manufacturer_share_pct: float = 0.5
    top_n: int = 5
    top_models_limit: int = 20
    top_cities_limit: int = 20

    # Global volume forecast
    r2_confidence_threshold: float = 0.7
    growth_floor: float = -0.10
    growth_ceiling: float = 0.20
    linear_floor_ratio: float = 0.3
    absolute_floor_ratio: float = 0.2
    seasonal_amplitude: float = 0.1
    seasonal_period_divisor: float = 6.0
    min_base_confidence: float = 0.5
    confidence_decay_per_period: float = 0.05
    min_distance_decay: float = 0.3
    min_confidence_pct: int = 30

    # Per-entity one-step projections
    manufacturer_min_confidence: float = 0.4
    manufacturer_forecast_limit: int = 10
    state_forecast_limit: int = 8
    fuel_accelerating_slope: float = 5.0


# Singletons
config = Config()
settings = AnalysisSettings()
