from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    log_level: str = "INFO"
    database_properties: str = "database.properties"
    places_config: str = "input/config.json"
    session_secret: str = "change-me"
    hotels_path: str | None = None
    reviews_path: str | None = None
    ingest_workers: int = 20
    ingest_grace_seconds: float = 60.0
    attractions_radius: int = 2
    fetch_timeout: float = 30.0
