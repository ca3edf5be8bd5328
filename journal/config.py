"""Application configuration via environment variables."""

from pathlib import Path
from pydantic_settings import BaseSettings

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    database_url: str = f"sqlite:///{PROJECT_ROOT / 'journal.db'}"
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:3000"]
    timezone: str = "Asia/Seoul"  # trading day boundary

    # Passphrase gate
    gate_passphrase_hash: str = ""  # bcrypt hash; generate with: python -m journal.cli hash-passphrase
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    unlock_months: int = 1

    # Market data
    yahoo_base_url: str = "https://query1.finance.yahoo.com"
    market_timeout_seconds: float = 10.0

    # Price streams
    price_streams_enabled: bool = True
    mexc_ws_url: str = "wss://contract.mexc.com/edge"
    binance_ws_url: str = "wss://stream.binance.com:9443/stream"
    stream_ping_seconds: float = 20.0
    stream_reconnect_seconds: float = 5.0

    # Exchange accounts (read-only)
    mexc_api_base: str = "https://contract.mexc.com"
    mexc_api_key: str = ""
    mexc_api_secret: str = ""
    binance_api_base: str = "https://testnet.binancefuture.com"
    binance_api_key: str = ""
    binance_api_secret: str = ""

    model_config = {"env_prefix": "TJ_", "env_file": ".env"}


settings = Settings()
