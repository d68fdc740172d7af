from contextlib import contextmanager
from flask import has_app_context

# Created lazily the first time a service runs outside a request (CLI, scripts).
flask_app = None


def _get_app():
    global flask_app
    if flask_app is None:
        from src.app_factory import create_app
        flask_app = create_app()
    return flask_app


@contextmanager
def db_context():
    """Provide an application context for DB work, reusing the active one if present."""
    if has_app_context():
        yield
        return
    with _get_app().app_context():
        yield
