import uvicorn

from storefront.app import create_app
from storefront.config import settings
from storefront.logging_config import configure_logging

configure_logging(settings.log_level, settings.log_json)

app = create_app()


if __name__ == "__main__":
    uvicorn.run("main:app", host="127.0.0.1", port=8000)
