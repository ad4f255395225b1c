import os
from pathlib import Path
from typing import List
from pydantic import BaseModel
from dotenv import load_dotenv

# Resolve backend directory and load .env explicitly
BACKEND_DIR = Path(__file__).resolve().parents[2]  # .../backend
load_dotenv(BACKEND_DIR / ".env")  # do NOT set override=True; shell exports still win

def _csv_env(name: str, default: str) -> List[str]:
    return [s.strip() for s in os.getenv(name, default).split(",") if s.strip()]

class Settings(BaseModel):
    env: str = os.getenv("APP_ENV", "dev")
    port: int = int(os.getenv("PORT", "8000"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    quote_base_url: str = os.getenv("QUOTE_BASE_URL", "https://query1.finance.yahoo.com/v8/finance/chart")
    quote_user_agent: str = os.getenv("QUOTE_USER_AGENT", "Mozilla/5.0")
    http_timeout_s: float = float(os.getenv("HTTP_TIMEOUT_S", "10"))
    fetch_concurrency: int = int(os.getenv("FETCH_CONCURRENCY", "8"))
    cors_origins: List[str] = _csv_env("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173")
    api_base_url: str = os.getenv("API_BASE_URL", "http://localhost:8000")

settings = Settings()
