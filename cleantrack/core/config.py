# cleantrack/core/config.py
import os
from dotenv import load_dotenv

load_dotenv()

class Settings:
    FIREBASE_PROJECT_ID: str = os.getenv("FIREBASE_PROJECT_ID", "dogus-otomat-takip")
    FIREBASE_DATABASE_URL: str = os.getenv(
        "FIREBASE_DATABASE_URL",
        "https://dogus-otomat-takip-default-rtdb.europe-west1.firebasedatabase.app",
    )
    FIREBASE_WEB_API_KEY: str = os.getenv("FIREBASE_WEB_API_KEY", "")
    FIREBASE_SERVICE_ACCOUNT_PATH: str = os.getenv(
        "FIREBASE_SERVICE_ACCOUNT_PATH",
        "firebase-service-account.json",
    )

    # All collections live under this node of the realtime database
    DATABASE_ROOT: str = os.getenv("DATABASE_ROOT", "temizlikTakip")

    # Report ids: <prefix>-<sequence><YYYYMMDD>
    REPORT_ID_PREFIX: str = os.getenv("REPORT_ID_PREFIX", "DGS")
    REPORT_ID_USE_COUNTER: bool = os.getenv("REPORT_ID_USE_COUNTER", "true").lower() == "true"

    # Photo compression
    PHOTO_MAX_WIDTH: int = int(os.getenv("PHOTO_MAX_WIDTH", "800"))
    PHOTO_MAX_HEIGHT: int = int(os.getenv("PHOTO_MAX_HEIGHT", "600"))
    PHOTO_JPEG_QUALITY: int = int(os.getenv("PHOTO_JPEG_QUALITY", "70"))
    PHOTO_STORAGE_DIR: str = os.getenv("PHOTO_STORAGE_DIR", "local_photos")

    AUTH_REQUEST_TIMEOUT: float = float(os.getenv("AUTH_REQUEST_TIMEOUT", "15"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS: list = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]


settings = Settings()
