from participation_service.routes.admin import admin_bp
from participation_service.routes.competition import competition_bp
from participation_service.routes.participation import participation_bp

__all__ = ["admin_bp", "competition_bp", "participation_bp"]
