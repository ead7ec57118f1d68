"""Run the API with uvicorn: ``python -m wellbeing_chat``."""

import uvicorn

from .config.app_config import get_app_config


def main() -> None:
    app_config = get_app_config()
    uvicorn.run(
        "wellbeing_chat.main:create_app",
        factory=True,
        host=app_config.app_host,
        port=app_config.app_port,
        reload=app_config.app_debug,
    )


if __name__ == "__main__":
    main()
