import pytest

from timecapsule.core.errors import AuthError, ValidationError
from timecapsule.service.auth import AuthGateway


@pytest.fixture
def auth(gateway):
    return AuthGateway(gateway)


def test_sign_in_returns_explicit_session(auth):
    session = auth.sign_in("carol@example.com", "correct-horse")
    assert session.user_id == "user-carol"
    assert session.email == "carol@example.com"
    assert session.access_token == "token-carol@example.com"


def test_wrong_password(auth):
    with pytest.raises(AuthError):
        auth.sign_in("carol@example.com", "battery-staple")


@pytest.mark.parametrize("email,password", [("", "pw"), ("   ", "pw"), ("a@b.c", "")])
def test_empty_credentials(auth, email, password):
    with pytest.raises(ValidationError):
        auth.sign_in(email, password)


def test_sign_up_pending_confirmation(auth, fake_supabase):
    fake_supabase.auto_confirm = False
    assert auth.sign_up("dave@example.com", "pw") is None


def test_sign_up_with_session(auth):
    assert auth.sign_up("dave@example.com", "pw").user_id == "user-dave"


def test_sign_out_uses_session_client(auth, fake_supabase, alice):
    auth.sign_out(alice)
    assert fake_supabase.auth.signed_out
    assert ("alice-token", "") in fake_supabase.auth.sessions


def test_sign_out_without_session_is_noop(auth, fake_supabase):
    auth.sign_out(None)
    assert not fake_supabase.auth.signed_out
