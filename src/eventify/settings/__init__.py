"""Django settings for the eventify project.

Settings are split by concern; every value is read through python-decouple so that the
environment (or a .env file) can override it.
"""

from .base import *  # noqa: F401,F403
from .celery import *  # noqa: F401,F403
from .email import *  # noqa: F401,F403
from .ninja import *  # noqa: F401,F403
from .observability import *  # noqa: F401,F403
from .stripe import *  # noqa: F401,F403
