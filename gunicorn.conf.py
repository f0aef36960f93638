"""Gunicorn config: gunicorn -c gunicorn.conf.py biblio.main:app"""
import os

bind = f"0.0.0.0:{os.environ.get('PORT', '8000')}"

# Uvicorn async workers: each loads its own copy of the catalog at startup
worker_class = "uvicorn.workers.UvicornWorker"
workers = int(os.environ.get("WEB_CONCURRENCY", "2"))

# Startup waits on every source fetch (bounded by BIBLIO_FETCH_TIMEOUT)
timeout = 60

graceful_timeout = 30
keepalive = 65

# Logging
accesslog = "-"
errorlog = "-"
loglevel = os.environ.get("LOG_LEVEL", "info").lower()
