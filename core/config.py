from decouple import config, Csv

class Settings:
    # Database Configuration
    DATABASE_URL: str = config("DATABASE_URL", default="sqlite:///./nearby_shops.db")
    DB_POOL_SIZE: int = config("DB_POOL_SIZE", default=10, cast=int)
    DB_ECHO: bool = config("DB_ECHO", default=False, cast=bool)

    # Storage Configuration
    UPLOAD_DIR: str = config("UPLOAD_DIR", default="uploads")
    CHAT_FILES_SUBDIR: str = config("CHAT_FILES_SUBDIR", default="chat-files")
    MAX_UPLOAD_BYTES: int = config("MAX_UPLOAD_BYTES", default=10 * 1024 * 1024, cast=int)

    # Search Configuration
    PLACEHOLDER_IMAGE_URL: str = config("PLACEHOLDER_IMAGE_URL", default="https://via.placeholder.com/300x200")
    DEFAULT_SEARCH_RADIUS_KM: float = config("DEFAULT_SEARCH_RADIUS_KM", default=10, cast=float)
    DEFAULT_VISIBILITY_RADIUS_KM: float = config("DEFAULT_VISIBILITY_RADIUS_KM", default=5, cast=float)

    # URL Configuration
    CORS_ORIGINS: list = config(
        "CORS_ORIGINS",
        default="http://localhost:3000,http://localhost:8081,http://localhost:19006",
        cast=Csv()
    )

    # Environment
    ENVIRONMENT: str = config("ENVIRONMENT", default="development")
    DEBUG: bool = config("DEBUG", default=False, cast=bool)

    # Logging
    LOG_LEVEL: str = config("LOG_LEVEL", default="INFO")

settings = Settings()
