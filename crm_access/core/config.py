from pydantic import model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "postgresql://crm:crm_pass@db:5432/crm_access"
    SECRET_KEY: str = "change-me-to-a-random-secret-key"
    ENVIRONMENT: str = "development"
    AUTH_ENABLED: bool = False
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480  # 8 hours

    # Where denied users are sent when a guard asks for the home page
    HOME_PATH: str = "/dashboard"

    model_config = {"env_file": ".env", "extra": "ignore"}

    @model_validator(mode="after")
    def fix_postgres_url(self) -> "Settings":
        # Railway sometimes provides postgres:// instead of postgresql://
        if self.DATABASE_URL.startswith("postgres://"):
            self.DATABASE_URL = self.DATABASE_URL.replace(
                "postgres://", "postgresql://", 1
            )
        return self


settings = Settings()
