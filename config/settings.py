from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Redis (event fan-out to indexers; disabled unless PUBLISH_EVENTS=True)
    REDIS_URL: str = "redis://localhost:6379/0"
    PUBLISH_EVENTS: bool = False
    EVENTS_CHANNEL: str = "pm.events"
    EVENTS_FLUSH_INTERVAL_SECONDS: float = 1.0
    REDIS_MAX_CONNECTIONS: int = 10
    EVENTS_OUTBOX_LIMIT: int = 10_000

    # JWT: no default, MUST be set in .env
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 30

    # Privileged identities
    ADMIN_ID: str = "admin"
    AGGREGATOR_ID: str = "vote-aggregator"
    PROTOCOL_FEE_WALLET: str = "protocol-fee-wallet"

    # Default global config (bps / seconds)
    PROTOCOL_FEE_BPS: int = 300
    RESOLVER_FEE_BPS: int = 200
    LP_FEE_BPS: int = 500
    PROPOSAL_APPROVAL_THRESHOLD_BPS: int = 7000
    DISPUTE_SUCCESS_THRESHOLD_BPS: int = 6000
    MIN_RESOLUTION_DELAY_SECONDS: int = 86_400
    DISPUTE_PERIOD_SECONDS: int = 259_200
    MIN_RESOLVER_REPUTATION_BPS: int = 8000

    # Market escrow
    MARKET_RESERVE_FLOOR: int = 1_000_000
    MAX_MARKET_LIFETIME_SECONDS: int = 5 * 365 * 86_400

    # Monitor (finalizer + vote aggregator loop; off unless RUN_MONITOR=True)
    RUN_MONITOR: bool = False
    MONITOR_INTERVAL_SECONDS: float = 60.0
    MONITOR_BATCH_SIZE: int = 10

    # App
    APP_NAME: str = "LMSR Prediction Market"
    DEBUG: bool = False  # Safe default for production; set DEBUG=True in .env for local dev


settings = Settings()
