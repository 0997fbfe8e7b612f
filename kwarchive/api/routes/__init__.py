from .admin_routes import create_admin_routes
from .catalog_routes import create_catalog_routes
from .query_routes import create_query_routes

__all__ = ['create_admin_routes', 'create_catalog_routes', 'create_query_routes']
