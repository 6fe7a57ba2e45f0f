from __future__ import annotations

from fastapi import FastAPI

from bookstore.bootstrap import build_app


def create_asgi_app() -> FastAPI:
    return build_app()
