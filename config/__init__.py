import os


def get_settings_module() -> str:
    # APP_ENV picks the settings module; anything unknown falls back to development
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "config.production"

    if env in {"test", "testing"}:
        return "config.testing"

    return "config.development"


def load_settings(module) -> dict:
    """Upper-case attributes of a settings module as a plain dict."""
    return {name: getattr(module, name) for name in dir(module) if name.isupper()}
