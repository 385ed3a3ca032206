from __future__ import annotations

import os
from pathlib import Path
from typing import List


class Settings:
    """Centralized configuration for the NutraMeter backend."""

    def __init__(self) -> None:
        base_dir = Path(__file__).resolve().parent
        repo_root = base_dir.parent
        data_root_default = repo_root / "data"

        self.data_root: Path = Path(
            os.environ.get("NUTRAMETER_DATA_ROOT") or data_root_default
        ).expanduser()
        self.db_path: Path = Path(
            os.environ.get("NUTRAMETER_DB_PATH") or (self.data_root / "nutrameter.db")
        ).expanduser()
        # Seconds to wait on the durable store before serving from the fallback store.
        self.db_timeout: float = float(os.environ.get("NUTRAMETER_DB_TIMEOUT") or "5")
        # In production you MUST set NUTRAMETER_JWT_SECRET.
        self.jwt_secret: str = os.environ.get("NUTRAMETER_JWT_SECRET") or "nutrameter_secret"
        self.token_ttl_days: int = int(os.environ.get("NUTRAMETER_TOKEN_TTL_DAYS") or "7")
        self.log_level: str = (os.environ.get("NUTRAMETER_LOG_LEVEL") or "INFO").upper()

        # ---- AI photo analysis (Gemini) ----
        self.gemini_api_key: str | None = os.environ.get("GEMINI_API_KEY") or None
        self.gemini_model: str = os.environ.get("GEMINI_MODEL") or "gemini-2.5-flash"
        self.gemini_base_url: str = (
            os.environ.get("GEMINI_BASE_URL") or "https://generativelanguage.googleapis.com/v1beta"
        ).rstrip("/")
        self.gemini_timeout: float = float(os.environ.get("GEMINI_TIMEOUT") or "30")
        self.max_image_bytes: int = int(os.environ.get("NUTRAMETER_MAX_IMAGE_BYTES") or "5000000")

        # ---- Insight thresholds ----
        self.calorie_over_ratio: float = float(os.environ.get("NUTRAMETER_CALORIE_OVER_RATIO") or "1.1")
        self.calorie_under_ratio: float = float(os.environ.get("NUTRAMETER_CALORIE_UNDER_RATIO") or "0.6")
        self.calorie_under_min_meals: int = int(os.environ.get("NUTRAMETER_CALORIE_UNDER_MIN_MEALS") or "2")
        self.protein_calorie_share: float = float(os.environ.get("NUTRAMETER_PROTEIN_CALORIE_SHARE") or "0.30")
        self.protein_low_ratio: float = float(os.environ.get("NUTRAMETER_PROTEIN_LOW_RATIO") or "0.6")
        self.protein_high_ratio: float = float(os.environ.get("NUTRAMETER_PROTEIN_HIGH_RATIO") or "0.9")
        self.sodium_alert_mg: float = float(os.environ.get("NUTRAMETER_SODIUM_ALERT_MG") or "2000")
        self.sodium_daily_limit_mg: float = float(os.environ.get("NUTRAMETER_SODIUM_DAILY_LIMIT_MG") or "2300")
        self.health_high_score: float = float(os.environ.get("NUTRAMETER_HEALTH_HIGH_SCORE") or "70")
        self.health_low_score: float = float(os.environ.get("NUTRAMETER_HEALTH_LOW_SCORE") or "50")
        self.consistency_high_days: int = int(os.environ.get("NUTRAMETER_CONSISTENCY_HIGH_DAYS") or "5")
        self.consistency_low_days: int = int(os.environ.get("NUTRAMETER_CONSISTENCY_LOW_DAYS") or "3")
        self.max_ai_tips: int = int(os.environ.get("NUTRAMETER_MAX_AI_TIPS") or "3")

        cors = os.environ.get("NUTRAMETER_CORS_ORIGINS", "*")
        if cors.strip() == "*":
            self.cors_origins: List[str] = ["*"]
        else:
            self.cors_origins = [
                origin.strip() for origin in cors.split(",") if origin.strip()
            ]


settings = Settings()
