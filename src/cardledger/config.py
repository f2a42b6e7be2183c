from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    db_host: str = "localhost"
    db_port: int = 54377
    db_user: str = "postgres"
    db_password: str = "postgres"
    db_name: str = "cardledger"
    redis_url: str = "redis://localhost:6379/0"
    debug: bool = True
    default_currency: str = "EUR"
    default_condition: str = "Near Mint"
    scan_match_window_days: int = 30  # Scan -> purchased lot matching window
    task_timeout_seconds: float = 600.0

    @property
    def database_url(self) -> str:
        return f"postgresql+asyncpg://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    class Config:
        env_file = ".env"


settings = Settings()
