"""
Gunicorn configuration for routeproxy

    gunicorn -c gunicorn_config.py app:app
"""
import multiprocessing
import os

bind = f"0.0.0.0:{os.environ.get('PORT', '5000')}"

# Proxied requests spend their time waiting on upstreams, so each gevent
# worker holds many at once. Every worker keeps its own routes cache: a save
# reaches the other workers after at most CONFIG_CACHE_TTL seconds.
workers = int(os.environ.get('WEB_CONCURRENCY', multiprocessing.cpu_count() + 1))
worker_class = 'gevent'
worker_connections = 1000
# Upper bound for one proxied exchange; keep above PROXY_UPSTREAM_TIMEOUT
timeout = int(os.environ.get('GUNICORN_TIMEOUT', 120))

accesslog = '-'
errorlog = '-'
loglevel = os.environ.get('LOG_LEVEL', 'info').lower()

proc_name = 'routeproxy'
