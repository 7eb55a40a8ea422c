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
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./articles.db")
    REDIS_URL = data.get("REDIS_URL", "redis://localhost:6379/0")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    CREATE_TABLES_ON_STARTUP = bool(data.get("CREATE_TABLES_ON_STARTUP", True))

    # Job queue
    QUEUE_BACKEND = data.get("QUEUE_BACKEND", "redis")  # redis | memory
    QUEUE_NAME = data.get("QUEUE_NAME", "generation_jobs")
    QUEUE_POLL_TIMEOUT_SECONDS = data.get("QUEUE_POLL_TIMEOUT_SECONDS", 5)

    # Generation workers
    WORKER_CONCURRENCY = int(data.get("WORKER_CONCURRENCY", 5))
    TITLE_PACING_SECONDS = float(data.get("TITLE_PACING_SECONDS", 1.0))  # Delay between titles of one job
    MAX_DELIVERY_ATTEMPTS = int(data.get("MAX_DELIVERY_ATTEMPTS", 3))

    # Content providers: identifier -> (backend, model name)
    DEFAULT_AI_MODEL = data.get("DEFAULT_AI_MODEL", "gpt4")
    AI_MODELS = data.get("AI_MODELS", {
        "gpt4": ("openai", "gpt-4-turbo"),
        "gpt3": ("openai", "gpt-3.5-turbo"),
        "claude": ("anthropic", "claude-3-sonnet-20240229"),
    })
    OPENAI_API_KEY = data.get("OPENAI_API_KEY", os.environ.get("OPENAI_API_KEY"))
    OPENAI_BASE_URL = data.get("OPENAI_BASE_URL", None)
    ANTHROPIC_API_KEY = data.get("ANTHROPIC_API_KEY", os.environ.get("ANTHROPIC_API_KEY"))
    PROVIDER_TIMEOUT_SECONDS = float(data.get("PROVIDER_TIMEOUT_SECONDS", 120))
    PROVIDER_MAX_RETRIES = int(data.get("PROVIDER_MAX_RETRIES", 2))

    # Images
    IMAGE_BACKEND = data.get("IMAGE_BACKEND", "placeholder")  # flux | placeholder | none
    FLUX_API_KEY = data.get("FLUX_API_KEY", os.environ.get("FLUX_API_KEY", ""))
    FLUX_API_URL = data.get("FLUX_API_URL", "https://api.flux.ai/v1/images/generations")

    # Credits
    SETTLEMENT_OVERAGE_POLICY = data.get("SETTLEMENT_OVERAGE_POLICY", "debit")  # debit | cap

    # Ledger Reconciliation Configuration
    RECONCILIATION_ENABLED = bool(data.get("RECONCILIATION_ENABLED", True))
    RECONCILIATION_INTERVAL_SECONDS = data.get("RECONCILIATION_INTERVAL_SECONDS", 86400)  # Daily
