import os

from clinic_api.app_factory import create_app


if __name__ == "__main__":
    """
    Entrypoint for the clinic scheduling API.
    Use a WSGI server (gunicorn) in production.
    """
    app = create_app()
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", 3000)), debug=app.config.get("DEBUG", False))
