import os
from functools import lru_cache


class Settings:
    def __init__(self):
        self.default_currency = os.getenv("SETTLEUP_DEFAULT_CURRENCY", "USD").strip().upper() or "USD"
        self.log_level = os.getenv("SETTLEUP_LOG_LEVEL", "INFO").strip().upper() or "INFO"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
