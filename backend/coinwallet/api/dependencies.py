"""Request-scoped access to the application context."""
from fastapi import Request
from coinwallet.context import AppContext


def get_context(request: Request) -> AppContext:
    return request.app.state.context
