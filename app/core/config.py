from dotenv import load_dotenv
from pydantic_settings import BaseSettings

load_dotenv()


class Settings(BaseSettings):
    DATABASE_URL: str = ""
    ENVIRONMENT: str = "local"
    LOG_LEVEL: str = "INFO"

    # "sql" talks to DATABASE_URL through SQLAlchemy, "supabase" to the hosted tables
    STORE_BACKEND: str = "sql"

    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: str = ""
    # service_role key, bypasses row-level security. Server-side only.
    SUPABASE_SERVICE_ROLE_KEY: str = ""

    # Simulated "AI analysis" pause before a progress photo is saved
    PHOTO_ANALYSIS_DELAY_SECONDS: float = 2.0
    MAX_PHOTO_SIZE_MB: int = 10

    PHOTO_HISTORY_MONTHS: int = 12
    WEIGHT_HISTORY_MONTHS: int = 6


settings = Settings()
