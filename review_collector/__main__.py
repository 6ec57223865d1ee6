"""
Run the API server: python -m review_collector
"""
import uvicorn

from review_collector.core.config import settings


def main():
    uvicorn.run(
        "review_collector.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
