import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./portal.db")
    STORAGE_BACKEND = data.get("STORAGE_BACKEND", "sql")
    AUTO_CREATE_TABLES = bool(data.get("AUTO_CREATE_TABLES", True))
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")

    # Rate limiting of credential-bearing endpoints
    RATE_LIMIT_MAX_ATTEMPTS = int(data.get("RATE_LIMIT_MAX_ATTEMPTS", 5))
    RATE_LIMIT_WINDOW_SECONDS = int(data.get("RATE_LIMIT_WINDOW_SECONDS", 15 * 60))
    RATE_LIMIT_BLOCK_SECONDS = int(data.get("RATE_LIMIT_BLOCK_SECONDS", 60 * 60))
    RATE_LIMIT_RETENTION_SECONDS = int(
        data.get("RATE_LIMIT_RETENTION_SECONDS", 24 * 60 * 60)
    )
    CLEANUP_INTERVAL_SECONDS = int(data.get("CLEANUP_INTERVAL_SECONDS", 10 * 60))
    # Peers allowed to set cf-connecting-ip / x-forwarded-for / x-real-ip
    TRUSTED_PROXIES = list(data.get("TRUSTED_PROXIES") or [])

    # Sessions
    SESSION_TTL_DAYS = int(data.get("SESSION_TTL_DAYS", 30))
    ADMIN_SESSION_TTL_HOURS = int(data.get("ADMIN_SESSION_TTL_HOURS", 24))
    SESSION_COOKIE_NAME = data.get("SESSION_COOKIE_NAME", "user_session")
    ADMIN_SESSION_COOKIE_NAME = data.get("ADMIN_SESSION_COOKIE_NAME", "admin_session")
    SESSION_COOKIE_SECURE = bool(data.get("SESSION_COOKIE_SECURE", False))

    # Credentials
    BCRYPT_ROUNDS = int(data.get("BCRYPT_ROUNDS", 12))
    PASSWORD_MIN_LENGTH = int(data.get("PASSWORD_MIN_LENGTH", 8))
    PASSWORD_REQUIRE_UPPER = bool(data.get("PASSWORD_REQUIRE_UPPER", True))
    PASSWORD_REQUIRE_LOWER = bool(data.get("PASSWORD_REQUIRE_LOWER", True))
    PASSWORD_REQUIRE_DIGIT = bool(data.get("PASSWORD_REQUIRE_DIGIT", True))
    PASSWORD_SYMBOLS = data.get("PASSWORD_SYMBOLS", "@$!%*?&")
    USERNAME_MIN_LENGTH = int(data.get("USERNAME_MIN_LENGTH", 3))

    # Bootstrap administrator, created on startup when missing
    ADMIN_USERNAME = data.get("ADMIN_USERNAME", "")
    ADMIN_PASSWORD = data.get("ADMIN_PASSWORD", "")
    ADMIN_EMAIL = data.get("ADMIN_EMAIL", "admin@localhost")

    # External provisioning
    PROVISIONING_TIMEOUT_SECONDS = float(data.get("PROVISIONING_TIMEOUT_SECONDS", 15))
    PLEX_TOKEN = data.get("PLEX_TOKEN", "")
    PLEX_BASE_URL = data.get("PLEX_BASE_URL", "")
    PLEX_TV_URL = data.get("PLEX_TV_URL", "https://plex.tv")
    PLEX_LIBRARY_IDS = data.get("PLEX_LIBRARY_IDS", "")
    PLEX_CLIENT_IDENTIFIER = data.get("PLEX_CLIENT_IDENTIFIER", "media-request-portal")
    AUDIOBOOKSHELF_BASE_URL = data.get("AUDIOBOOKSHELF_BASE_URL", "")
    AUDIOBOOKSHELF_API_TOKEN = data.get("AUDIOBOOKSHELF_API_TOKEN", "")
    AUDIOBOOKSHELF_PUBLIC_URL = data.get("AUDIOBOOKSHELF_PUBLIC_URL", "")
