from .user import user_bp
from .doctor import doctor_bp
from .admin import admin_bp
from .health import health_bp

__all__ = ['user_bp', 'doctor_bp', 'admin_bp', 'health_bp']
