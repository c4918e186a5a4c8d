from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Document store
    db_path: str = "data/trade_journal.db"
    db_cache_mb: int = 16

    # Web server
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # MT5 ZeroMQ
    mt5_zmq_host: str = "127.0.0.1"
    mt5_zmq_rep_port: int = 5555
    mt5_request_timeout_ms: int = 15000

    # Ingestion
    upload_concurrency: int = 8
    store_timeout_seconds: float = 10.0
    broker_timeout_seconds: float = 30.0
    max_parallel_syncs: int = 4

    # Reconciliation
    pairing_policy: str = "first_match"  # "first_match" or "volume_weighted"
    market_session_classifier: str = "placeholder"  # "placeholder" or "utc_hour"

    # Logging
    log_level: str = "INFO"
    log_file: str = "data/trade_journal.log"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def zmq_rep_address(self) -> str:
        return f"tcp://{self.mt5_zmq_host}:{self.mt5_zmq_rep_port}"


settings = Settings()
