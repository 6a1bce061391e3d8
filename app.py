"""
Main entry point for routeproxy.
"""
import os
import logging
from routeproxy import create_app

logging.basicConfig(level=os.environ.get('LOG_LEVEL', 'info').upper())

app = create_app()

if __name__ == '__main__':
    port = int(os.environ.get("PORT", 5000))

    # Enable debug mode by default for local development
    # Set FLASK_ENV=production to disable debug mode
    debug = os.environ.get('FLASK_ENV') != 'production'

    # For local development, use localhost; for production, use 0.0.0.0
    host = '127.0.0.1' if debug else '0.0.0.0'

    logging.getLogger(__name__).info("Starting routeproxy on http://%s:%s (admin page at /admin)", host, port)
    logging.getLogger(__name__).info("Debug mode: %s", "ON" if debug else "OFF")

    app.run(host=host, port=port, debug=debug, threaded=True)
