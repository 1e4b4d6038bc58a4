"""
WSGI entry point for production deployment
Run with: gunicorn wsgi:app
"""
from app import create_app

# Create Flask app instance
application = app = create_app()

if __name__ == '__main__':
    # For development only
    application.run(debug=True)
