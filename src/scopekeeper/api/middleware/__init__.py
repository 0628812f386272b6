from scopekeeper.api.middleware.logging_middleware import LoggingMiddleware

__all__ = ["LoggingMiddleware"]
