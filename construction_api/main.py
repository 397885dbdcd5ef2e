"""
ASGI entrypoint.  The app is built from environment settings at import::

    uvicorn construction_api.main:app --reload
"""

from .application import create_app

app = create_app()
