from __future__ import annotations

import uvicorn

from bookstore.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "bookstore.asgi:create_asgi_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=False,
    )


if __name__ == "__main__":
    main()
