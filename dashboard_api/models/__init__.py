from dashboard_api.models.user_secret import UserSecret
from dashboard_api.models.app_settings import AppSettings

__all__ = ["UserSecret", "AppSettings"]
