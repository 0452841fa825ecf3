"""
Gunicorn configuration for the webhook service.

    gunicorn -c gunicorn.conf.py run:app
"""
import os

bind = f"0.0.0.0:{os.getenv('PORT', '8080')}"

# Each delivery is handled to completion inside one sync worker.
# Shopify gives up on a delivery after 5 seconds, so keep timeouts short.
workers = int(os.getenv('GUNICORN_WORKERS', '2'))
worker_class = 'sync'
timeout = int(os.getenv('GUNICORN_TIMEOUT', '30'))
keepalive = 5

# Logging
accesslog = '-'  # stdout
errorlog = '-'   # stderr
loglevel = os.getenv('LOG_LEVEL', 'info')
capture_output = True

proc_name = 'merchant-ops'

preload_app = True

graceful_timeout = 30


def on_starting(server):
    print("[Gunicorn] Starting Merchant Ops webhook service...")


def on_exit(server):
    print("[Gunicorn] Merchant Ops webhook service shutting down...")
