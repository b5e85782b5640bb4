"""
Application configuration.

Values come from the environment (a local .env file is loaded once here)
and are merged into the Flask app config by the gateway's app factory.
"""

import os
from typing import Dict, Any

from dotenv import load_dotenv

# Load .env only once here
load_dotenv()


def _int_env(name: str, default: int) -> int:
    return int(os.getenv(name, default))


def load_config() -> Dict[str, Any]:
    """
    Read all settings from the environment.

    Returns:
        dict: Settings keyed by their Flask config name.
    """
    return {
        "JWT_SECRET": os.getenv("JWT_SECRET"),
        "DATABASE_URL": os.getenv("DATABASE_URL"),
        # "postgres" for the real database, "memory" for local experiments
        "STORE_BACKEND": os.getenv("STORE_BACKEND", "postgres"),
        "TOKEN_EXPIRATION_MINUTES": _int_env("TOKEN_EXPIRATION_MINUTES", 60),
        # Lockout policy: lock after more than MAX_FAILED_LOGINS failures
        "MAX_FAILED_LOGINS": _int_env("MAX_FAILED_LOGINS", 5),
        "LOCKOUT_MINUTES": _int_env("LOCKOUT_MINUTES", 2),
        "CORS_ORIGINS": os.getenv("CORS_ORIGINS", "*"),
        "ARGON2_TIME_COST": _int_env("ARGON2_TIME_COST", 3),
        "ARGON2_MEMORY_COST": _int_env("ARGON2_MEMORY_COST", 65536),
        "ARGON2_PARALLELISM": _int_env("ARGON2_PARALLELISM", 4),
        "GATEWAY_PORT": _int_env("GATEWAY_PORT", 5050),
    }
