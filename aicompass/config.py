from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_DATA_DIR = Path(__file__).parent / "catalog" / "data"


def get_config() -> Config:
    return Config()


class Config(BaseSettings):
    api_token: str | None = None
    allow_anonymous: bool = True

    sqlite_file_path: str = (Path.cwd() / "aicompass.sqlite").expanduser().resolve().absolute().as_posix()
    use_postgres: bool = False
    pg_user: str | None = "postgres"
    pg_password: str | None = "postgres"
    pg_host: str | None = "localhost"
    pg_port: int | None = 5432
    pg_database: str | None = "aicompass"

    model_provider: str = "groq"
    model_name: str = "meta-llama/llama-4-scout-17b-16e-instruct"

    llm_catalog_path: str = (_DATA_DIR / "llms.json").as_posix()
    tool_catalog_path: str = (_DATA_DIR / "tools.json").as_posix()
    page_size: int = 3

    retry_max_attempts: int = 3
    retry_delay_unit: float = 0.5
    retry_rate_limited_attempts: int = 1

    # None keeps re-prompting forever
    confirm_retry_limit: int | None = None

    # In-memory sessions kept before the least recently used are dropped
    max_sessions: int = 1024

    backend_url: str = "http://localhost:9772"

    model_config = SettingsConfigDict(env_prefix="aicompass_", case_sensitive=False, frozen=True)

    def get_db_url(self, async_mode: bool = True) -> str:
        if self.use_postgres:
            if not all([
                self.pg_user,
                self.pg_password,
                self.pg_host,
                self.pg_port,
                self.pg_database,
            ]):
                raise ValueError("PostgreSQL configuration is incomplete")
            return f"postgresql+psycopg://{self.pg_user}:{self.pg_password}@{self.pg_host}:{self.pg_port}/{self.pg_database}"
        else:
            if not self.sqlite_file_path:
                raise ValueError("SQLite file path is not configured")
            sqlite_file_path = Path(self.sqlite_file_path).expanduser().resolve().absolute().as_posix()
            if async_mode:
                return f"sqlite+aiosqlite:///{sqlite_file_path}"
            else:
                return f"sqlite+pysqlite:///{sqlite_file_path}"
