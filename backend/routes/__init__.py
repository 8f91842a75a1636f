"""
Routes package for the Obras back-office API.
Each module holds the Flask blueprint of one collection.
"""

# (module, blueprint attribute, url prefix)
BLUEPRINTS = [
    ('routes.auth', 'auth_bp', '/api/auth'),
    ('routes.companies', 'companies_bp', '/api/companies'),
    ('routes.contractors', 'contractors_bp', '/api/contractors'),
    ('routes.workers', 'workers_bp', '/api/workers'),
    ('routes.sites', 'sites_bp', '/api/sites'),
    ('routes.activities', 'activities_bp', '/api/activities'),
    ('routes.purchase_orders', 'purchase_orders_bp', '/api/purchaseOrders'),
    ('routes.measurement_sheets', 'measurement_sheets_bp', '/api/measurementSheets'),
    ('routes.health', 'health_bp', '/api'),  # Health check endpoint
]

__all__ = ['BLUEPRINTS']
