from src.api.proxy.routes import router
from src.api.proxy.service import ProxyService

__all__ = ["ProxyService", "router"]
