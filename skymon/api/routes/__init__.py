from .metrics_routes import create_metrics_routes

__all__ = ["create_metrics_routes"]
