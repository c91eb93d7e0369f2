import sys

from pydantic_settings import BaseSettings

_ENV_FILE = None if "pytest" in sys.modules else ".env"


class Settings(BaseSettings):
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    EMPLOYEE_API_BASE_URL: str = ""
    EMPLOYEE_LIST_PATH: str = "/pos-endpoint/getEmployees.php"
    EMPLOYEE_UPDATE_PATH: str = "/pos-endpoint/updateEmployee.php"
    EMPLOYEE_API_TIMEOUT_SECONDS: float = 30.0

    MERGE_SAVED_EDITS: bool = True

    # role -> "ACTION:Resource" grants consumed by the permission gate
    ROLE_PRIVILEGES: dict[str, list[str]] = {
        "admin": ["EXPORT:Employee List", "EDIT:Employee List"],
        "manager": ["EXPORT:Employee List"],
    }

    SESSION_TOKEN_SECRET: str = ""
    SESSION_TOKEN_ALGORITHMS: list[str] = ["HS256"]
    SESSION_ROLE_CLAIM: str = "role"
    SESSION_TAG_CLAIM: str = "employee_tag"
    SESSION_NAME_CLAIM: str = "name"
    SESSION_MAX_STORES: int = 256
    SESSION_IDLE_TTL_SECONDS: float = 1800.0

    CORS_ORIGINS: list[str] = ["http://localhost:8100", "http://localhost:5173"]

    model_config = {
        "env_file": _ENV_FILE,
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }


settings = Settings()
