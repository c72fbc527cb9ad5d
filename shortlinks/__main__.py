import uvicorn

from shortlinks.core.config import settings


def main():
    uvicorn.run(
        "shortlinks.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
