from pydantic_settings import BaseSettings
from typing import Literal

class Settings(BaseSettings):
    SUPABASE_URL: str = "http://localhost:54321"
    SUPABASE_KEY: str = ""
    PROPERTIES_TABLE: str = "properties"
    IMAGES_BUCKET: str = "property-images"
    CATALOG_SOURCE: str = "sample"  # sample | supabase
    MAP_MODE: Literal["pins", "map", "grid"] = "grid"
    REDIS_URL: str = "redis://localhost:6379/0"
    DATABASE_URL: str = ""
    HTTP_TIMEOUT: float = 15.0
    AUTH_RATE_LIMIT: int = 5

    class Config:
        env_file = ".env"

settings = Settings()
