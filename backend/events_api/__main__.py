import uvicorn

from events_api.core.config import settings


def main() -> None:
    uvicorn.run(
        "events_api.main:app",
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
    )


if __name__ == "__main__":
    main()
