"""
Application settings.

Values come from environment variables; a ``.env`` file in the working
directory is loaded first when present.  ``Settings.from_env`` reads the
environment at call time so tests and deployments can build their own
instance and hand it to ``create_app``.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


@dataclass
class Settings:
    project_name: str = "Construction Project API"
    api_version: str = "1.0.0"
    log_level: str = "INFO"
    log_file: Optional[str] = None
    database_url: str = "sqlite:///./construction.db"

    # Token signing.  ``secret_key`` has no default: authentication fails
    # closed when it is missing.
    secret_key: Optional[str] = None
    issuer: str = "construction-project-api"
    audience: str = "construction-project-api-clients"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30

    # The single administrator account.
    admin_username: Optional[str] = None
    admin_password: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        defaults = cls()
        return cls(
            project_name=os.getenv("PROJECT_NAME", defaults.project_name),
            api_version=os.getenv("API_VERSION", defaults.api_version),
            log_level=os.getenv("LOG_LEVEL", defaults.log_level),
            log_file=os.getenv("LOG_FILE", "logs/construction-api.log") or None,
            database_url=os.getenv("DATABASE_URL", defaults.database_url),
            secret_key=os.getenv("AUTH_SECRET_KEY") or None,
            issuer=os.getenv("AUTH_ISSUER", defaults.issuer),
            audience=os.getenv("AUTH_AUDIENCE", defaults.audience),
            algorithm=os.getenv("AUTH_ALGORITHM", defaults.algorithm),
            access_token_expire_minutes=int(
                os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(defaults.access_token_expire_minutes))
            ),
            admin_username=os.getenv("ADMIN_USERNAME") or None,
            admin_password=os.getenv("ADMIN_PASSWORD") or None,
        )
