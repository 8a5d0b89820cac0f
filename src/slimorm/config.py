import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load the appropriate .env file on module import
env = os.environ.get("SLIMORM_ENV", "development").lower()
env_file = f".env.{env}"
if os.path.exists(env_file):
    load_dotenv(env_file)
else:
    # Fall back to the default .env file
    load_dotenv()

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass
class Config:
    environment: str
    database_url: str
    log_level: str

    @classmethod
    def from_env(cls) -> "Config":
        return cls(
            environment=env,
            database_url=os.environ.get(
                "DATABASE_URL", "postgresql://localhost:5432/slimorm"
            ),
            log_level=_log_level(os.environ.get("SLIMORM_LOG_LEVEL", "INFO")),
        )


def _log_level(value: str) -> str:
    # Unrecognized names fall back to INFO
    level = value.strip().upper()
    return level if level in LOG_LEVELS else "INFO"


config = Config.from_env()
