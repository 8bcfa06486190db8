from dataclasses import dataclass, field
from typing import List, Optional

from .config import (
    get_bool_setting,
    get_float_setting,
    get_gemini_api_key,
    get_int_setting,
    get_list_setting,
    get_model_name,
    get_str_setting,
)


@dataclass
class Settings:
    GEMINI_API_KEY: Optional[str]
    MODEL_NAME: str
    TEMPERATURE: float = 0.3
    MAX_TOKENS: int = 4096
    REQUEST_TIMEOUT: int = 120
    STRICT_MONTH_MATCHING: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = field(default_factory=lambda: ["*"])


def get_settings() -> Settings:
    return Settings(
        GEMINI_API_KEY=get_gemini_api_key(),
        MODEL_NAME=get_model_name(),
        TEMPERATURE=get_float_setting("TEMPERATURE", 0.3),
        MAX_TOKENS=get_int_setting("MAX_TOKENS", 4096),
        REQUEST_TIMEOUT=get_int_setting("REQUEST_TIMEOUT", 120),
        STRICT_MONTH_MATCHING=get_bool_setting("STRICT_MONTH_MATCHING", False),
        LOG_LEVEL=(get_str_setting("LOG_LEVEL", default="INFO") or "INFO").upper(),
        CORS_ORIGINS=get_list_setting("CORS_ORIGINS") or ["*"],
    )
