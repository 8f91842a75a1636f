from flask_cors import CORS
from flask import request

ALLOWED_HEADERS = [
    "Accept",
    "Authorization",
    "Cache-Control",
    "Content-Type",
    "Origin",
    "X-Requested-With",
]


def setup_cors(app):
    """
    CORS for the configured front-end origins, plus security and cache headers
    """
    allowed_origins = app.config.get('CORS_ORIGINS', [])

    CORS(app,
         origins=allowed_origins,
         allow_headers=ALLOWED_HEADERS,
         expose_headers=["Content-Disposition"],
         supports_credentials=app.config.get('CORS_SUPPORTS_CREDENTIALS', True),
         methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
         max_age=86400,
         send_wildcard=False,  # Required when supports_credentials=True
         vary_header=True
    )

    @app.after_request
    def add_security_headers(response):
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'

        # Cache control for API responses
        if request.path.startswith('/api/'):
            response.headers['Cache-Control'] = 'no-cache, no-store, must-revalidate'
            response.headers['Pragma'] = 'no-cache'
            response.headers['Expires'] = '0'

        return response

    app.logger.info(f"✓ CORS configured with {len(allowed_origins)} allowed origins")
