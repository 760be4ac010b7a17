from typing import List, Optional
from pydantic_settings import BaseSettings
from functools import lru_cache

from faucetswap.infra.config.chains import ChainConfig, DEFAULT_CHAINS

class Settings(BaseSettings):
    # App Settings
    APP_NAME: str = "FaucetSwap"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    # Security Settings
    JWT_SECRET_KEY: str = "your-secret-key"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # Wallet login nonce
    NONCE_EXPIRY_SECONDS: int = 300  # 5 minutes
    NONCE_BYTES: int = 32

    # Wallet addresses allowed to call admin endpoints (lowercase)
    ADMIN_ADDRESSES: List[str] = []

    # CORS
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",  # Frontend development
        "https://faucetswap.app",  # Production frontend
    ]

    # Redis Settings
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_MAX_CONNECTIONS: int = 10

    # Database Settings
    DATABASE_URL: Optional[str] = None  # overrides the POSTGRES_* parts when set
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "faucetswap"
    POSTGRES_MIN_POOL_SIZE: int = 5
    POSTGRES_MAX_POOL_SIZE: int = 20
    DB_LOGGING_ENABLED: bool = False
    DB_CREATE_TABLES: bool = True  # create missing tables on startup

    # HTTP client settings (no retries anywhere)
    HTTP_DEFAULT_TIMEOUT: float = 10.0
    HTTP_EVM_RPC_TIMEOUT: float = 10.0
    HTTP_SUI_RPC_TIMEOUT: float = 10.0
    HTTP_MAX_CONNECTIONS: int = 100
    HTTP_MAX_KEEPALIVE_CONNECTIONS: int = 20

    # Chain adapter settings
    CHAINS: List[ChainConfig] = DEFAULT_CHAINS
    EVM_LOG_LOOKBACK_BLOCKS: int = 5000
    SUI_EVENT_PAGE_LIMIT: int = 50
    SUI_MAX_EVENT_PAGES: int = 10
    RECENT_ACTIVITY_MAX_LIMIT: int = 200

    class Config:
        env_file = ".env"
        case_sensitive = True

@lru_cache()
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
