import os

# Database Configuration
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./exchango_alerts.db")

# Twilio Configuration
TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID")
TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN")
TWILIO_WHATSAPP_NUMBER = os.getenv("TWILIO_WHATSAPP_NUMBER")

# Redis Configuration
REDIS_HOSTNAME = os.getenv("REDIS_HOSTNAME", "localhost")
REDIS_PORT = os.getenv("REDIS_PORT", "6379")

# Celery Configuration
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", f"redis://{REDIS_HOSTNAME}:{REDIS_PORT}/1")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", f"redis://{REDIS_HOSTNAME}:{REDIS_PORT}/1")

# Exchange Configuration
REFERENCE_CURRENCY_CODE = os.getenv("REFERENCE_CURRENCY_CODE", "MAD")  # Local currency, base of every office rate
LOCAL_TIMEZONE = os.getenv("LOCAL_TIMEZONE", "Africa/Casablanca")

# Event Bus Configuration
EVENT_QUEUE_MAX_PENDING = int(os.getenv("EVENT_QUEUE_MAX_PENDING", "1000"))  # In-process queue bound

# Reminder Configuration
RATE_REMINDER_HOUR = int(os.getenv("RATE_REMINDER_HOUR", "9"))  # Local hour of the daily reminder
RATE_REMINDER_STALE_HOURS = int(os.getenv("RATE_REMINDER_STALE_HOURS", "24"))  # Hours without a rate update

# Logging Configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_PATH = os.getenv("LOG_PATH", "logs/app.log")
