import os


def get_settings_module() -> str:
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "gatepass_system.config.production"

    if env in {"test", "testing"}:
        return "gatepass_system.config.testing"

    return "gatepass_system.config.development"


def split_origins(raw: str) -> list[str]:
    return [origin.strip() for origin in (raw or "").split(",") if origin.strip()]
