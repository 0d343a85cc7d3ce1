import os

from .config import *  # noqa: F401,F403

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Development applies the schema by default
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
