from pydantic_settings import BaseSettings
from pathlib import Path


class Settings(BaseSettings):
    """Application settings"""

    # API settings
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    LOG_LEVEL: str = "INFO"

    # Scaffolding settings
    OUTPUT_DIR: Path = Path("output")
    INSTALL_NEST_CLI: bool = True

    # Dev server settings
    PORT_RANGE_START: int = 8080
    PORT_RANGE_SIZE: int = 100
    STARTUP_TIMEOUT: float = 8.0
    DEV_SERVER_COMMAND: list[str] = ["npm", "start"]

    # CORS settings
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
