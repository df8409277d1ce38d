"""Run the API server: python -m daygoals."""
import uvicorn

from daygoals.config import settings


def main() -> None:
    uvicorn.run(
        "daygoals.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
