"""WSGI entry point for gunicorn (``vidtube.wsgi:app``)."""

from vidtube.factory import create_app

app = create_app()
