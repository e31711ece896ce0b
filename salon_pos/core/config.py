from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = Field(default="Salon POS", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    data_dir: Path = Field(default=Path("data"), alias="DATA_DIR")
    db_filename: str = Field(default="pos.db", alias="DB_FILENAME")
    action_log_filename: str = Field(default="pos-actions.log", alias="ACTION_LOG_FILENAME")
    autosave_seconds: float = Field(default=30.0, alias="AUTOSAVE_SECONDS")
    business_name: str = Field(default="VanisBeauty", alias="BUSINESS_NAME")
    default_admin_pin: str = Field(default="12345", alias="DEFAULT_ADMIN_PIN")
    currency_symbol: str = Field(default="$", alias="CURRENCY_SYMBOL")
    pin_max_attempts: int = Field(default=5, alias="PIN_MAX_ATTEMPTS")
    pin_lockout_seconds: float = Field(default=60.0, alias="PIN_LOCKOUT_SECONDS")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    class Config:
        env_file = ".env"

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_filename

    @property
    def action_log_path(self) -> Path:
        return self.data_dir / self.action_log_filename


settings = Settings()
