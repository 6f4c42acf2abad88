"""
Shared FastAPI dependencies.
"""
from fastapi import Request

from repair_crm.config import Settings


def get_app_settings(request: Request) -> Settings:
    """Settings the running app was created with."""
    return request.app.state.settings
