import os


def get_settings_module() -> str:
    # Settings module is chosen by APP_ENV, defaulting to development.
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "hostel_system.settings.production"

    if env in {"test", "testing"}:
        return "hostel_system.settings.testing"

    return "hostel_system.settings.development"
