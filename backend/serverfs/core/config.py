from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Server Filesystem"
    debug: bool = False

    # Paths
    data_dir: Path = Path(__file__).resolve().parent.parent.parent / "servers"
    config_filename: str = "server.json"

    # Limits
    max_read_bytes: int = 10_000_000
    tail_bytes: int = 80_000
    batch_concurrency: int = 5

    # Archives
    archive_prefix: str = "ptdlfm."
    archive_token_length: int = 8

    # Config watcher
    watch_config: bool = True
    watch_debounce_ms: int = 200

    model_config = {
        "env_file": str(Path(__file__).resolve().parent.parent.parent / ".env"),
        "env_prefix": "SERVERFS_",
    }


settings = Settings()
