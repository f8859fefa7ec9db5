# Vault - Web API
#
# FastAPI backend providing REST endpoints for the vault, the credential
# generator and the strength scorer.

from .main import app, create_app, start_api_server

__all__ = [
    "app",
    "create_app",
    "start_api_server",
]
