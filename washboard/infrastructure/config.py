from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite+pysqlite:///./data/washboard.db"
    openapi_path: Path = Path(__file__).resolve().parents[1] / "openapi/openapi.yaml"

    # live stream
    heartbeat_interval: float = 30.0
    client_retry_ms: int = 3000
    sink_buffer_size: int = 256

    log_level: str = "INFO"


settings = Settings()
