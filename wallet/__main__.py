import uvicorn

from .api import create_app
from .config import configure_logging, get_settings


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    app = create_app(settings=settings)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
