from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    BACKEND_API_URL: str = "https://backend.tsmwa.online"
    NOTIFY_API_URL: str = "https://notify.tsmwa.online"

    SECRET_KEY: str = "CHANGE_ME"
    ALGORITHM: str = "HS256"
    SESSION_COOKIE_NAME: str = "access_token"
    SESSION_EXPIRE_MINUTES: int = 60 * 24
    COOKIE_SECURE: bool = False

    REQUEST_TIMEOUT: int = 30
    LOGIN_PATH: str = "/login"
    LOG_LEVEL: str = "INFO"
    ENV: str = "local"

    class Config:
        env_file = ".env"

    @property
    def HEALTH_CHECK_URL(self) -> str:
        return f"{self.BACKEND_API_URL.rstrip('/')}/api/health/check"


settings = Settings()
