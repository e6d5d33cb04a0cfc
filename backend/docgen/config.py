from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str = "postgresql+psycopg://user:password@db/docgen"

    CELERY_BROKER_URL: str = "redis://redis:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://redis:6379/0"

    GENERATION_SERVICE_URL: str = "http://generator:5678/webhook/generate-document"
    GENERATION_TIMEOUT_SECONDS: float = 300.0
    GENERATION_WORKER_CONCURRENCY: int = 4
    GENERATION_QUEUE: str = "generation"

    JOB_RETENTION_DAYS: int = 7
    SWEEP_CHECK_INTERVAL_SECONDS: int = 15 * 60
    SWEEP_PERIOD_SECONDS: int = 24 * 60 * 60
    SWEEPER_ENABLED: bool = True

    CORS_MAX_AGE_SECONDS: int = 24 * 60 * 60

    PDF_RENDER_TIMEOUT_MS: int = 30000

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"

settings = Settings()
