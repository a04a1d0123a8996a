"""Run the API with uvicorn: `python -m edubridge`."""

import uvicorn

from .config import settings


if __name__ == "__main__":
    uvicorn.run("edubridge.main:app", host=settings.HOST, port=settings.PORT)
