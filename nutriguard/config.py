from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite:///./nutriguard.db"
    anthropic_api_key: str = ""

    vision_model: str = "claude-sonnet-4-5-20250929"  # Used for scan, care plan and recipes

    # Anthropic API timeout settings (seconds)
    anthropic_timeout: int = 120
    anthropic_connect_timeout: int = 10  # Connection establishment

    # Max output tokens per operation
    analysis_max_tokens: int = 2048
    plan_max_tokens: int = 4096
    recipe_max_tokens: int = 6144

    # Scan history
    history_limit: int = 20  # Most recent scans kept
    upload_dir: str = "uploads/scans"

    # Image limits before sending to the vision API
    max_image_dimension: int = 1920
    max_image_bytes: int = 5 * 1024 * 1024  # API rejects larger images

    default_locale: str = "zh"

    class Config:
        env_file = ".env"


settings = Settings()
