from media_gateway.api.errors.handlers import register_exception_handlers

__all__ = ["register_exception_handlers"]
