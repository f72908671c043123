import os

from dotenv import load_dotenv

load_dotenv()

# Credentials the dispatcher cannot run without.
REQUIRED_SETTINGS = (
    "NOTION_API_KEY",
    "NOTION_DATABASE_ID",
    "OPENAI_API_KEY",
    "OPENAI_ORGANIZATION_ID",
    "OPENAI_PROJECT_ID",
    "TELNYX_API_KEY",
    "TELNYX_FROM_NUMBER",
)


class Settings:
    # --- Notion (event store) ---
    NOTION_API_KEY = os.environ.get("NOTION_API_KEY")
    NOTION_DATABASE_ID = os.environ.get("NOTION_DATABASE_ID")

    # --- Redis (Celery broker + run guard) ---
    REDIS_URL = os.environ.get("REDIS_URL")
    BROKER_URL = REDIS_URL or "redis://localhost:6379/0"

    # --- OpenAI / LLM ---
    OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY")
    OPENAI_ORGANIZATION_ID = os.environ.get("OPENAI_ORGANIZATION_ID")
    OPENAI_PROJECT_ID = os.environ.get("OPENAI_PROJECT_ID")
    OPENAI_MODEL = os.environ.get("OPENAI_MODEL", "gpt-4")
    OPENAI_TIMEOUT = int(os.environ.get("OPENAI_TIMEOUT", "30"))

    # --- Telnyx (SMS) ---
    TELNYX_API_KEY = os.environ.get("TELNYX_API_KEY")
    TELNYX_FROM_NUMBER = os.environ.get("TELNYX_FROM_NUMBER")

    # --- Scheduling ---
    REMINDER_TIMEZONE = os.environ.get("REMINDER_TIMEZONE", "America/New_York")
    REMINDER_LOCK_TTL = int(os.environ.get("REMINDER_LOCK_TTL", "900"))

    def missing(self, names=REQUIRED_SETTINGS) -> list[str]:
        """Return the names from *names* that are unset or blank."""
        return [name for name in names if not (getattr(self, name, None) or "").strip()]

    def require(self, names=REQUIRED_SETTINGS) -> None:
        missing = self.missing(names)
        if missing:
            raise RuntimeError(f"Missing required configuration: {', '.join(missing)}")


settings = Settings()
