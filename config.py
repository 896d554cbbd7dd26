import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./agency.db")
    AUTO_CREATE_TABLES = bool(data.get("AUTO_CREATE_TABLES", True))
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ENABLE_LOGGING_MIDDLEWARE = bool(data.get("ENABLE_LOGGING_MIDDLEWARE", 1))
    ENABLE_SENTRY = data.get("ENABLE_SENTRY", 0)
    DSN_SENTRY = data.get("DSN_SENTRY", "")
    SENTRY_ENVIRONMENT = data.get("SENTRY_ENVIRONMENT", "dev")

    # Invoicing defaults
    DEFAULT_CURRENCY = data.get("DEFAULT_CURRENCY", "CZK")
    INVOICE_NUMBER_PREFIX = data.get("INVOICE_NUMBER_PREFIX", "FV")
    MISSING_REFERENCE_PLACEHOLDER = data.get("MISSING_REFERENCE_PLACEHOLDER", "—")
    ISSUED_BY_DEFAULT = data.get("ISSUED_BY_DEFAULT", "user-1")

    # Engagements starting on or before this day of month are billed in full
    PRORATION_FULL_CHARGE_MAX_START_DAY = data.get("PRORATION_FULL_CHARGE_MAX_START_DAY", 5)

    # Invoicing provider (simulated)
    INVOICING_PROVIDER_URL = data.get(
        "INVOICING_PROVIDER_URL", "https://app.fakturoid.cz/agency"
    )
    ISSUANCE_SIMULATED_DELAY_SECONDS = data.get("ISSUANCE_SIMULATED_DELAY_SECONDS", 0.8)
    ISSUANCE_MAX_RETRIES = data.get("ISSUANCE_MAX_RETRIES", 3)
    ISSUANCE_RETRY_BACKOFF_SECONDS = data.get("ISSUANCE_RETRY_BACKOFF_SECONDS", 0.5)
    ISSUANCE_NOTIFICATION_WEBHOOK = data.get("ISSUANCE_NOTIFICATION_WEBHOOK", None)

    # Unbilled one-off overview
    UNBILLED_ITEM_AGE_WARNING_DAYS = data.get("UNBILLED_ITEM_AGE_WARNING_DAYS", 60)
