from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    data_dir: Path = Path.home() / ".flashdeck" / "data"
    sqlite_filename: str = "flashdeck.db"
    host: str = "0.0.0.0"
    port: int = 5500  # 0 = pick a free port
    log_level: str = "info"
    cors_origins: list[str] = ["*"]
    static_dir: Path | None = None

    ollama_host: str = "localhost"
    ollama_port: int = 11434
    # Tried in order until one answers
    ollama_models: list[str] = ["phi4-mini", "phi", "mistral", "llama2", "tinyllama"]
    generation_temperature: float = 0.7
    generation_max_tokens: int = 500
    generation_timeout: float = 120.0
    health_timeout: float = 3.0
    proxy_timeout: float = 300.0

    max_interval_minutes: float = 30 * 24 * 60

    model_config = {"env_prefix": "FLASHDECK_"}

    @property
    def ollama_base_url(self) -> str:
        return f"http://{self.ollama_host}:{self.ollama_port}"


settings = Settings()
