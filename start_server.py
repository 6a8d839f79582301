import sys
import uvicorn
from dotenv import load_dotenv

load_dotenv()

from app.core.config import Settings  # noqa: E402

settings = Settings()

if __name__ == '__main__':
    if settings.test_mode:
        print(f"Can't start server | test_mode: {settings.test_mode}")
        sys.exit(1)
    uvicorn.run(
        app='app.main:app',
        host='127.0.0.1',
        port=8000,
        reload=True,
        reload_excludes=['app/tests/*']
        )

# pydantic settings converts 'True'/'False' strings from .env into bool
# as long as the bool type hint is used
