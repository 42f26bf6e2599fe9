"""Configuration management for the application."""
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    api_title: str = "Coin Wallet API"
    api_version: str = "1.0.0"
    api_prefix: str = "/api/v1"

    # CORS Configuration
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Logging
    log_level: str = "INFO"

    # EOS Configuration
    eos_rpc_url: str = "https://eos.greymass.com"
    eos_token: str = "eosio.token"
    eos_symbol: str = "EOS"
    eos_decimals: int = 4
    eos_default_memo: str = "from Coin Wallet"
    eos_http_timeout: float = 30.0
    eos_transactions_page_size: int = 50

    # Restore settings persistence (in-memory when unset)
    restore_settings_path: Optional[str] = None

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
