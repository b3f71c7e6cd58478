"""FastAPI HTTP layer package.

Public re-export so callers can write::

    from speedreader.api import app

    uvicorn speedreader.api:app --reload
"""

from speedreader.api.app import app
