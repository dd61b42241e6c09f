import os


def get_settings_module() -> str:
    # APP_ENV selects the settings module; defaults to development
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "config.production"

    if env in {"test", "testing"}:
        return "config.testing"

    return "config.development"


def class_options_from_env(default: tuple) -> tuple:
    """CLASS_OPTIONS='Matematika,Fisika,...' overrides the built-in class list."""
    raw = os.getenv("CLASS_OPTIONS", "")
    items = tuple(x.strip() for x in raw.split(",") if x.strip())
    return items or default
