"""FastAPI dependency exposing the settings the application was built with."""

from typing import Annotated

from fastapi import Depends, Request

from engagement.config.settings import Settings


def get_app_settings(request: Request) -> Settings:
    """Settings attached to the running app (tests may inject their own)."""
    return request.app.state.settings


AppSettings = Annotated[Settings, Depends(get_app_settings)]
