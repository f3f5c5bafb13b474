import threading
from contextlib import contextmanager

from flask import has_app_context

# Created lazily for callers running outside a request (scripts, shells)
flask_app = None
_app_lock = threading.Lock()


def _get_app():
    global flask_app
    with _app_lock:
        if flask_app is None:
            from clinic_api.app_factory import create_app
            flask_app = create_app()
    return flask_app


@contextmanager
def db_context():
    """Ensure an application context around a series of DB operations."""
    if has_app_context():
        yield
        return

    with _get_app().app_context():
        yield
