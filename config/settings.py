# config/settings.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    ค่าตั้งของระบบเงินเดือน/ล็อกอินพนักงาน
    อ่านจาก Environment Variables หรือไฟล์ .env
    """
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ฐานข้อมูล
    DATABASE_URL: str = "sqlite:///./hrm_payroll.db"

    # Session cookie (Starlette SessionMiddleware)
    SESSION_SECRET: str = "dev-secret"
    SESSION_COOKIE: str = "hrm_session"

    # Lockout
    AUTH_MAX_FAILED_ATTEMPTS: int = 5
    AUTH_LOCK_DURATION_MINUTES: int = 30

    # Password hashing (PBKDF2-HMAC-SHA256)
    PBKDF2_ITERATIONS: int = 100_000
    PBKDF2_SALT_BYTES: int = 16
    TEMP_PASSWORD_LENGTH: int = 12

    # Payroll
    TAX_FISCAL_YEAR: str = "2025-26"

    LOG_LEVEL: str = "INFO"


settings = Settings()
