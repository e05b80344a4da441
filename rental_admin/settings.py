import os

db_url = os.environ.get("DB_URL", "sqlite://:memory:")
REDIS_URL = os.environ.get("REDIS_URL", "redis://localhost:6379/0")
api_prefix = os.environ.get("API_PREFIX", "/api")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# "memory" keeps codes in-process, "redis" shares them across workers
OTP_BACKEND = os.environ.get("OTP_BACKEND", "memory")
OTP_TTL = int(os.environ.get("OTP_TTL_SECONDS", "600"))  # 10 minutes
OTP_SWEEP_INTERVAL = int(os.environ.get("OTP_SWEEP_INTERVAL_SECONDS", "300"))

EFFECT_TIMEOUT = float(os.environ.get("EFFECT_TIMEOUT_SECONDS", "10"))

smtp_host = os.environ.get("SMTP_HOST", "localhost")
smtp_port = int(os.environ.get("SMTP_PORT", "587"))
smtp_secure = os.environ.get("SMTP_SECURE", "false").lower() == "true"
smtp_user = os.environ.get("SMTP_USER", "")
smtp_password = os.environ.get("SMTP_PASS", "")

company_name = os.environ.get("COMPANY_NAME", "AutoConnect Transport")
company_contact = os.environ.get("COMPANY_CONTACT", "otocnct@gmail.com")
currency_symbol = os.environ.get("CURRENCY_SYMBOL", "₱")
