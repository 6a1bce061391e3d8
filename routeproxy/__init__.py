"""
routeproxy - path-prefix reverse proxy with a cached, admin-editable routes table
"""
import logging
import os
from pathlib import Path

from flask import Flask

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_PASSWORD = "admin"


def create_app(test_config=None, store=None, clock=None):
    """Create and configure the Flask application"""
    # No static folder: every path outside the admin surface belongs to the proxy
    app = Flask(__name__, static_folder=None)
    # "//a" must reach the proxy as-is instead of being redirected to "/a"
    app.url_map.merge_slashes = False

    # Configuration
    app.config['ADMIN_PASSWORD'] = os.environ.get('ADMIN_PASSWORD') or DEFAULT_ADMIN_PASSWORD
    app.config['CONFIG_STORE_PATH'] = os.environ.get('CONFIG_STORE_PATH') or str(Path(app.instance_path) / 'proxy_store.json')
    app.config['CONFIG_CACHE_TTL'] = float(os.environ.get('CONFIG_CACHE_TTL', 60))
    # Upstream timeout in seconds; unset means wait as long as the upstream does
    upstream_timeout = os.environ.get('PROXY_UPSTREAM_TIMEOUT')
    app.config['PROXY_UPSTREAM_TIMEOUT'] = float(upstream_timeout) if upstream_timeout else None
    # Set TRUST_PROXY_HEADERS=1 when running behind nginx or another proxy
    app.config['TRUST_PROXY_HEADERS'] = os.environ.get('TRUST_PROXY_HEADERS') == '1'

    if test_config:
        app.config.update(test_config)

    if app.config['TRUST_PROXY_HEADERS']:
        from werkzeug.middleware.proxy_fix import ProxyFix
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1)

    if app.config['ADMIN_PASSWORD'] == DEFAULT_ADMIN_PASSWORD:
        logger.warning("ADMIN_PASSWORD is not set; the routes table is protected by the default password 'admin'")

    from routeproxy.models.config_cache import ConfigCache
    from routeproxy.models.config_store import ConfigStoreError, JsonFileStore

    if store is None:
        try:
            store = JsonFileStore(app.config['CONFIG_STORE_PATH'])
        except ConfigStoreError as e:
            # Proxy keeps serving (with no routes); saving config reports the failure
            logger.error(f"Config store init failed: {e}")

    cache_kwargs = {'ttl': app.config['CONFIG_CACHE_TTL']}
    if clock is not None:
        cache_kwargs['clock'] = clock
    app.extensions['config_cache'] = ConfigCache(store, **cache_kwargs)

    if store is not None:
        logger.info("Routes stored in %s (cache TTL %ss)", getattr(store, 'path', store), app.config['CONFIG_CACHE_TTL'])

    # Register blueprints
    # IMPORTANT: admin routes (/admin, /api/config) go BEFORE the proxy catch-all
    from routeproxy.features.admin.blueprint import bp as admin_bp
    from routeproxy.features.proxy.blueprint import bp as proxy_bp
    app.register_blueprint(admin_bp)
    app.register_blueprint(proxy_bp)

    return app
