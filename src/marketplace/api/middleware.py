"""Per-request domain context and log context."""

from fastapi import FastAPI, Request

from marketplace.utils.logging import add_context, clear_context


def install_domain_context(app: FastAPI, domain) -> None:
    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        """Push the marketplace domain context and a fresh log context for each request."""
        clear_context()
        add_context(path=request.url.path, method=request.method)
        with domain.domain_context():
            response = await call_next(request)
        return response
