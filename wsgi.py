"""
WSGI entry point; also what the ``flask`` CLI loads.

Usage:
    flask --app wsgi run
    flask --app wsgi db upgrade
    flask --app wsgi seed-demo
    flask --app wsgi aoi list --year 2025
"""

from gcg_hub import create_app

app = create_app()
