from decouple import config

from .base import DEBUG

EMAIL_HOST = config("EMAIL_HOST", default="localhost")
EMAIL_PORT = config("EMAIL_PORT", default=587, cast=int)
EMAIL_HOST_USER = config("EMAIL_HOST_USER", default="")
EMAIL_HOST_PASSWORD = config("EMAIL_HOST_PASSWORD", default="")
EMAIL_USE_SSL = config("EMAIL_USE_SSL", default=False, cast=bool)
EMAIL_USE_TLS = config("EMAIL_USE_TLS", default=False, cast=bool)
DEFAULT_FROM_EMAIL = config("DEFAULT_FROM_EMAIL", default="Eventify <no-reply@eventify.local>")

EMAIL_DRY_RUN = config("EMAIL_DRY_RUN", default=False, cast=bool)

if EMAIL_DRY_RUN or DEBUG:
    EMAIL_BACKEND = "django.core.mail.backends.console.EmailBackend"
else:
    EMAIL_BACKEND = "django.core.mail.backends.smtp.EmailBackend"

NOTIFICATION_RETENTION_DAYS = config("NOTIFICATION_RETENTION_DAYS", default=90, cast=int)

# Outside of live mode every email goes to the catch-all mailbox instead of the real recipient.
EMAIL_LIVE_MODE = config("EMAIL_LIVE_MODE", default=not DEBUG, cast=bool)
EMAIL_CATCHALL_ADDRESS = config("EMAIL_CATCHALL_ADDRESS", default="")
