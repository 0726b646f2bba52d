"""
Role-gated navigation.

Pure functions from (role, permissions) to the actions a user may reach, so the
header of any client can be rendered from the result without re-implementing
the role rules.
"""
from typing import Any, Dict, List, Mapping, Optional

from ..models.database_models import HeaderView, NavAction, ReportType
from ..models.user import UserRole

APP_TITLE = "Doğuş Otomat Cleaning & Fill Tracking"

ADMIN_PANEL = NavAction(key="admin_panel", label="Admin Panel", path="/admin", icon="admin_panel_settings")
HOME = NavAction(key="home", label="Home", path="/", icon="dashboard")
ICE_CREAM_REPORT = NavAction(key="ice_cream_report", label="Ice Cream Cleaning", path="/new-report", icon="assignment")
FRIDGE_REPORT = NavAction(key="fridge_report", label="Fresh Fridge Filling", path="/new-fridge-report", icon="kitchen")
LOGOUT = NavAction(key="logout", label="Log Out", path="/login", icon="logout")

# Report form -> permission flag an operator needs for it
REPORT_FORMS = [
    (ICE_CREAM_REPORT, ReportType.ICE_CREAM.value),
    (FRIDGE_REPORT, ReportType.FRIDGE.value),
]

ROLE_LABELS = {
    UserRole.ADMIN: "Admin",
    UserRole.ROUTEMAN: "Route Manager",
    UserRole.OPERATOR: "Operator",
    UserRole.DEALER: "Dealer",
    UserRole.VIEWER: "Viewer",
}

HOME_ROLES = {UserRole.ROUTEMAN, UserRole.OPERATOR, UserRole.DEALER, UserRole.VIEWER}


def _parse_role(role: Any) -> Optional[UserRole]:
    try:
        return UserRole(role)
    except ValueError:
        return None


def _has_permission(permissions: Optional[Mapping[str, Any]], flag: str) -> bool:
    if not permissions:
        return False
    if not isinstance(permissions, Mapping):
        permissions = getattr(permissions, "model_dump", lambda: {})()
    return bool(permissions.get(flag))


def report_form_actions(role: Any, permissions: Optional[Mapping[str, Any]] = None) -> List[NavAction]:
    """Report forms the user may open: all for route managers, flagged ones for operators."""
    parsed = _parse_role(role)
    if parsed == UserRole.ROUTEMAN:
        return [action for action, _ in REPORT_FORMS]
    if parsed == UserRole.OPERATOR:
        return [action for action, flag in REPORT_FORMS if _has_permission(permissions, flag)]
    return []


def allowed_actions(role: Any, permissions: Optional[Mapping[str, Any]] = None) -> List[NavAction]:
    """Toolbar actions, in display order. Unknown roles get nothing."""
    parsed = _parse_role(role)
    actions: List[NavAction] = []
    if parsed == UserRole.ADMIN:
        actions.append(ADMIN_PANEL)
    if parsed in HOME_ROLES:
        actions.append(HOME)
    actions.extend(report_form_actions(parsed, permissions))
    return actions


def menu_actions(role: Any, permissions: Optional[Mapping[str, Any]] = None) -> List[NavAction]:
    """Avatar menu entries: everything but Home, always ending with Log Out."""
    actions = [action for action in allowed_actions(role, permissions) if action.key != HOME.key]
    actions.append(LOGOUT)
    return actions


def role_display_name(role: Any) -> str:
    return ROLE_LABELS.get(_parse_role(role), ROLE_LABELS[UserRole.VIEWER])


def build_header(user: Optional[Dict[str, Any]], current_path: str = "/") -> Optional[HeaderView]:
    """Header for the signed-in user, or None when nobody is signed in."""
    if not user:
        return None

    role = user.get("role")
    permissions = user.get("permissions")

    buttons = [
        action.model_copy(update={"active": action.path == current_path})
        for action in allowed_actions(role, permissions)
    ]
    name = user.get("name") or user.get("email") or ""

    return HeaderView(
        title=APP_TITLE,
        user_label=f"{name} ({role_display_name(role)})",
        buttons=buttons,
        menu_items=menu_actions(role, permissions),
    )


class MenuState:
    """Open/closed state of the avatar menu. Any navigation closes it."""

    def __init__(self):
        self.is_open = False

    def open(self):
        self.is_open = True

    def close(self):
        self.is_open = False

    def select(self, action: NavAction) -> str:
        """Close the menu and return the path to navigate to."""
        self.close()
        return action.path


def can_submit_report(role: Any, permissions: Optional[Mapping[str, Any]], report_type: Any) -> bool:
    """Admins and route managers may file any report; operators only the flagged types."""
    parsed = _parse_role(role)
    if parsed in (UserRole.ADMIN, UserRole.ROUTEMAN):
        return True
    if parsed == UserRole.OPERATOR:
        flag = report_type.value if isinstance(report_type, ReportType) else str(report_type)
        return _has_permission(permissions, flag)
    return False
