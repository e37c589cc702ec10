import os

# Logging
LOG_LEVEL = os.getenv("SFR_LOG_LEVEL", "INFO").upper()

# Host templates: <ref>--<site>--<org>.<PLATFORM_DOMAIN>.(page|live)
PLATFORM_DOMAIN = os.getenv("SFR_PLATFORM_DOMAIN", "aem")
DEFAULT_PAGE_ENV = os.getenv("SFR_DEFAULT_PAGE_ENV", "page")
DEFAULT_REF = "main"

# Routing
DEFAULT_ENVIRONMENT = os.getenv("SFR_DEFAULT_ENVIRONMENT", "production")
PLACEHOLDER_PREFIX = "TODO_"

WEBHOOKS = {
    # dev folder -> SB02
    "dev": {
        "submit": os.getenv("SFR_WEBHOOK_DEV_SUBMIT", "TODO_SB02_SUBMIT_WEBHOOK"),
        "status": os.getenv("SFR_WEBHOOK_DEV_STATUS", "TODO_SB02_STATUS_WEBHOOK"),
    },
    # qa folder -> SB01
    "qa": {
        "submit": os.getenv("SFR_WEBHOOK_QA_SUBMIT", "TODO_SB01_SUBMIT_WEBHOOK"),
        "status": os.getenv("SFR_WEBHOOK_QA_STATUS", "TODO_SB01_STATUS_WEBHOOK"),
    },
    "production": {
        "submit": os.getenv(
            "SFR_WEBHOOK_PRODUCTION_SUBMIT",
            "https://hook.fusion.adobe.com/ep2dmd26o8rguldc72p6oh8v6j1w6die",
        ),
        "status": os.getenv(
            "SFR_WEBHOOK_PRODUCTION_STATUS",
            "https://hook.fusion.adobe.com/44gs9etbqjf5y2n06g8e9ds8ff9jhj07",
        ),
    },
}

# Single-endpoint override (applies to every environment/action when set)
WEBHOOK_URL = os.getenv("SFR_WEBHOOK_URL", "")
DEFAULT_WEBHOOK = "https://hook.us2.make.com/d5lqgghlwlcalpy2zw0l7tqukr0u75bd"

# Credentials forwarded to the webhooks
WEBHOOK_USER = os.getenv("SFR_WEBHOOK_USER", "secure-user")
WEBHOOK_PASSWORD = os.getenv("SFR_WEBHOOK_PASSWORD", "secure")

# Identity discovery
IDENTITY_ATTEMPTS = int(os.getenv("SFR_IDENTITY_ATTEMPTS", "20"))
IDENTITY_DELAY_MS = int(os.getenv("SFR_IDENTITY_DELAY_MS", "500"))
IDENTITY_SEARCH_BUDGET = int(os.getenv("SFR_IDENTITY_SEARCH_BUDGET", "500"))
ANONYMOUS = "anonymous"
UNKNOWN = "unknown"

# Network
HTTP_TIMEOUT = int(os.getenv("SFR_HTTP_TIMEOUT", "15"))
MAX_HTML_BYTES = int(os.getenv("SFR_MAX_HTML_BYTES", str(2 * 1024 * 1024)))
