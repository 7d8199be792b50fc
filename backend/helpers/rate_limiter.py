"""Rate limiter configuration module.

Kept separate from main.py so routers can decorate endpoints without
importing the application.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from models.config import settings

# Keyed by client IP; RATE_LIMIT_ENABLED=false turns every limit off
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)
