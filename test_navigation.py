import pytest

from cleantrack.models.database_models import ReportType
from cleantrack.services.navigation_service import (
    APP_TITLE,
    MenuState,
    allowed_actions,
    build_header,
    can_submit_report,
    menu_actions,
    role_display_name,
)


def _keys(actions):
    return [action.key for action in actions]


def test_admin_sees_only_admin_panel():
    assert _keys(allowed_actions("admin")) == ["admin_panel"]


def test_routeman_sees_home_and_both_report_forms():
    assert _keys(allowed_actions("routeman")) == ["home", "ice_cream_report", "fridge_report"]


@pytest.mark.parametrize("permissions, expected", [
    ({"iceCream": True, "fridge": False}, ["home", "ice_cream_report"]),
    ({"iceCream": False, "fridge": True}, ["home", "fridge_report"]),
    ({"iceCream": True, "fridge": True}, ["home", "ice_cream_report", "fridge_report"]),
    ({}, ["home"]),
    (None, ["home"]),
])
def test_operator_forms_follow_permission_flags(permissions, expected):
    assert _keys(allowed_actions("operator", permissions)) == expected


@pytest.mark.parametrize("role", ["dealer", "viewer"])
def test_dealer_and_viewer_only_see_home(role):
    assert _keys(allowed_actions(role, {"iceCream": True, "fridge": True})) == ["home"]


@pytest.mark.parametrize("role", ["superuser", "", None])
def test_unknown_role_gets_no_actions(role):
    assert allowed_actions(role) == []


def test_menu_drops_home_and_ends_with_logout():
    items = menu_actions("operator", {"iceCream": True})
    assert _keys(items) == ["ice_cream_report", "logout"]
    assert items[-1].path == "/login"


def test_menu_for_unknown_role_still_offers_logout():
    assert _keys(menu_actions("ghost")) == ["logout"]


@pytest.mark.parametrize("role, label", [
    ("admin", "Admin"),
    ("routeman", "Route Manager"),
    ("operator", "Operator"),
    ("dealer", "Dealer"),
    ("viewer", "Viewer"),
    ("mystery", "Viewer"),
])
def test_role_display_name(role, label):
    assert role_display_name(role) == label


def test_no_header_without_user():
    assert build_header(None) is None
    assert build_header({}) is None


def test_header_marks_current_path_active():
    user = {"name": "Ayşe", "role": "routeman"}

    header = build_header(user, "/new-fridge-report")

    assert header.title == APP_TITLE
    assert header.user_label == "Ayşe (Route Manager)"
    active = [button.key for button in header.buttons if button.active]
    assert active == ["fridge_report"]
    assert _keys(header.menu_items) == ["ice_cream_report", "fridge_report", "logout"]


def test_header_falls_back_to_email_for_label():
    header = build_header({"email": "ops@example.com", "role": "operator"})
    assert header.user_label == "ops@example.com (Operator)"
    # Home is at "/" which is the default path
    assert [b.key for b in header.buttons if b.active] == ["home"]


def test_header_does_not_mutate_shared_actions():
    build_header({"name": "x", "role": "routeman"}, "/new-report")
    assert all(not action.active for action in allowed_actions("routeman"))


def test_menu_state_closes_on_selection():
    menu = MenuState()
    assert menu.is_open is False

    menu.open()
    assert menu.is_open is True

    path = menu.select(menu_actions("admin")[0])
    assert path == "/admin"
    assert menu.is_open is False


@pytest.mark.parametrize("role, permissions, report_type, allowed", [
    ("admin", None, ReportType.ICE_CREAM, True),
    ("routeman", None, ReportType.FRIDGE, True),
    ("operator", {"iceCream": True}, ReportType.ICE_CREAM, True),
    ("operator", {"iceCream": True}, ReportType.FRIDGE, False),
    ("operator", {"fridge": True}, "fridge", True),
    ("dealer", {"iceCream": True}, ReportType.ICE_CREAM, False),
    ("viewer", None, ReportType.ICE_CREAM, False),
])
def test_can_submit_report(role, permissions, report_type, allowed):
    assert can_submit_report(role, permissions, report_type) is allowed
