"""Run the API with uvicorn: ``python -m smallyfit``."""
import uvicorn

from config.settings import settings

if __name__ == "__main__":
    uvicorn.run("smallyfit.api.main:app", host=settings.API_HOST, port=settings.API_PORT)
