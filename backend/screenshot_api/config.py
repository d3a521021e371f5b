"""
Application configuration
"""

import os

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124 Safari/537.36"
)


class Settings:
    """Application settings"""

    def __init__(self):
        self.DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
        self.HOST: str = os.getenv("HOST", "0.0.0.0")
        self.PORT: int = int(os.getenv("PORT", "10000"))
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "DEBUG" if self.DEBUG else "INFO").upper()

        # Security settings - an empty key disables the check entirely
        self.API_KEY: str = os.getenv("API_KEY", "")
        self.API_KEY_HEADER: str = os.getenv("API_KEY_HEADER", "x-api-key")

        # Browser settings
        self.BROWSER_HEADLESS: bool = os.getenv("BROWSER_HEADLESS", "true").lower() != "false"
        self.DEFAULT_USER_AGENT: str = os.getenv("DEFAULT_USER_AGENT", DEFAULT_USER_AGENT)

settings = Settings()
