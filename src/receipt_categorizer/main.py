import uvicorn

from receipt_categorizer.core import settings
from receipt_categorizer.logger import get_logging_config

DEFAULT_HOST = "0.0.0.0"


def main() -> None:
    uvicorn.run(
        "receipt_categorizer.app:app",
        host=settings.get_env_str("HOST", DEFAULT_HOST),
        port=settings.get_env_int("PORT", settings.DEFAULT_PORT, min_value=1),
        log_config=get_logging_config(),
    )


if __name__ == "__main__":
    main()
