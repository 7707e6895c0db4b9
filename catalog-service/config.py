"""Configuration du catalog-service.

Les valeurs viennent de l'environnement (et d'un fichier .env s'il existe).
Une valeur invalide arrête le service au démarrage.
"""
import os
from dataclasses import dataclass
from typing import List

from dotenv import load_dotenv

# Chargement des variables d'environnement
load_dotenv()

SERVICE_NAME = "catalog-service"


class ConfigurationError(Exception):
    """Raised when an environment variable holds an invalid value."""
    pass


def _get_int_env(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"Environment variable '{key}' must be an integer, got {value!r}")


@dataclass(frozen=True)
class Settings:
    host: str
    port: int
    upload_dir: str
    max_upload_size: int
    log_file: str
    log_level: str
    cors_origins: List[str]

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=_get_int_env("PORT", 8080),
            upload_dir=os.getenv("UPLOAD_DIR", "uploads"),
            max_upload_size=_get_int_env("MAX_UPLOAD_SIZE", 5 * 1024 * 1024),  # 5 MiB
            log_file=os.getenv("LOG_FILE", "logs.json"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        )


settings = Settings.from_env()
