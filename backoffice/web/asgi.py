# backoffice/web/asgi.py
"""
ASGI entrypoint: wrap the Flask (WSGI) backend for Uvicorn.

    uvicorn backoffice.web.asgi:app
"""

import os
from uvicorn.middleware.wsgi import WSGIMiddleware
from backoffice.web.app import create_app

ENV = os.getenv("APP_ENV") or os.getenv("FLASK_ENV") or "production"

flask_app = create_app(ENV)

app = WSGIMiddleware(flask_app)
