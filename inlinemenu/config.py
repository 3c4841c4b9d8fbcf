from __future__ import annotations

import logging

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    MENU_ID_LENGTH: int = 10
    MENU_STRICT_MODE: bool = False
    MENU_PLACEHOLDER_TEXT: str = '…'
    MENU_SLOW_DISPATCH_SECONDS: float = 1.0

    LOG_LEVEL: str = 'INFO'
    LOG_FORMAT: str = 'console'

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
    )

    @field_validator('MENU_ID_LENGTH')
    @classmethod
    def _validate_id_length(cls, value: int) -> int:
        if value < 4:
            raise ValueError('MENU_ID_LENGTH must be at least 4')
        return value

    @field_validator('MENU_PLACEHOLDER_TEXT')
    @classmethod
    def _validate_placeholder(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError('MENU_PLACEHOLDER_TEXT must not be empty')
        return value

    def get_log_level(self) -> int:
        level = logging.getLevelName((self.LOG_LEVEL or '').strip().upper())
        if isinstance(level, int):
            return level
        return logging.INFO

    def is_json_logging(self) -> bool:
        return (self.LOG_FORMAT or '').strip().lower() == 'json'


settings = Settings()
