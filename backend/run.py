"""Run script with proper environment loading"""
import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env", override=True)

# Static paths in settings are relative to backend/
os.chdir(Path(__file__).resolve().parent)

if __name__ == "__main__":
    import uvicorn

    from realm.core.config import get_settings

    settings = get_settings()

    from main import app

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        reload=False,
    )
