from .user import User  # noqa: F401
from .promotion_request import PromotionRequest, PromotionStatus  # noqa: F401
from .role_change_request import RoleChangeRequest, DemotionStatus  # noqa: F401

from .audit_log import AuditLog  # noqa: F401
from .notification import Notification  # noqa: F401

from .system_settings import SystemSettings  # noqa: F401
