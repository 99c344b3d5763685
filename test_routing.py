import pytest

from timecapsule.core.routing import (
    CREATE,
    DASHBOARD,
    LOGIN,
    capsule_id_from_route,
    capsule_route,
    resolve_route,
)


@pytest.mark.parametrize("path", ["dashboard", "create", "capsule/abc", "/capsule/abc/"])
def test_protected_paths_redirect_to_login_without_session(path):
    assert resolve_route(path, None) == LOGIN


def test_login_redirects_to_dashboard_when_signed_in(alice):
    assert resolve_route("login", alice) == DASHBOARD


def test_login_is_served_without_session():
    assert resolve_route("login", None) == LOGIN


@pytest.mark.parametrize("path", ["", "/", None, "nowhere", "capsule/"])
def test_root_and_unknown_paths_follow_session(path, alice):
    assert resolve_route(path, alice) == DASHBOARD
    assert resolve_route(path, None) == LOGIN


def test_signed_in_user_reaches_protected_paths(alice):
    assert resolve_route(CREATE, alice) == CREATE
    assert resolve_route(capsule_route("abc"), alice) == "capsule/abc"


def test_capsule_id_from_route():
    assert capsule_id_from_route("capsule/42") == "42"
    assert capsule_id_from_route("dashboard") is None
    assert capsule_id_from_route("capsule/") is None
