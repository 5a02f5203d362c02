# api/rate_limit.py
import os
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from fastapi import FastAPI
from dotenv import load_dotenv

load_dotenv()
RATE_LIMIT = os.getenv("RATE_LIMIT", "100/minute")

limiter = Limiter(key_func=get_remote_address)


def register_rate_limit(app: FastAPI):
    """
    Attach the shared limiter to the app and install the 429 handler.

    slowapi's default handler already answers with an ``{"error": ...}``
    body, matching the shape of every other error this API returns.

    Args:
        app (FastAPI): The application to configure
    """
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
