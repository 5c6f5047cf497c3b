from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "cmdispatch"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True
    log_file: str = ""  # empty: log to stderr only

    # HTTP adapter
    catch_exceptions: bool = True  # turn exceptions raised in an endpoint into error responses
    route_prefix: str = "/commands"

    model_config = {"env_file": ".env", "env_prefix": "CMDISPATCH_"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
