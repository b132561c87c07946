import base64
import hashlib
from urllib.parse import parse_qs, urlparse

import pytest

from supaclient import AuthError, create_client
from supaclient.auth import generate_pkce_params, otp_payload
from supaclient.types import (
    EmailOtpType,
    ExchangeCodeOpts,
    FlowType,
    PhoneOtpType,
    ProviderSignInOptions,
    UserCredentials,
    VerifyEmailOtpCredentials,
    VerifyPhoneOtpCredentials,
)

URL = "https://project.supabase.co"
KEY = "anon-key"

SESSION = {
    "access_token": "access",
    "token_type": "bearer",
    "expires_in": 3600,
    "refresh_token": "refresh",
    "user": {"id": "u1", "email": "a@b.c"},
}


@pytest.fixture
def supabase(transport):
    return create_client(URL, KEY, transport=transport)


@pytest.mark.asyncio
async def test_sign_up(supabase, recorder):
    recorder.respond(200, body={"id": "u1", "email": "a@b.c"})

    user = await supabase.auth.sign_up(UserCredentials(email="a@b.c", password="pw"))

    assert user.id == "u1"
    assert str(recorder.last.url) == f"{URL}/auth/v1/signup"
    assert recorder.last_json() == {"email": "a@b.c", "password": "pw", "data": None}
    assert recorder.last.headers["apikey"] == KEY


@pytest.mark.asyncio
async def test_sign_in(supabase, recorder):
    recorder.respond(200, body=SESSION)

    details = await supabase.auth.sign_in(UserCredentials(email="a@b.c", password="pw"))

    assert details.access_token == "access"
    assert details.refresh_token == "refresh"
    assert details.user.email == "a@b.c"
    assert recorder.last.url.params["grant_type"] == "password"


@pytest.mark.asyncio
async def test_sign_in_error(supabase, recorder):
    recorder.respond(400, body={"error_code": "invalid_credentials", "msg": "Invalid login credentials"})

    with pytest.raises(AuthError) as exc_info:
        await supabase.auth.sign_in(UserCredentials(email="a@b.c", password="bad"))

    assert str(exc_info.value) == "invalid_credentials: Invalid login credentials"
    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_refresh_user(supabase, recorder):
    recorder.respond(200, body=SESSION)

    await supabase.auth.refresh_user("user-token", "refresh")

    assert recorder.last.url.params["grant_type"] == "refresh_token"
    assert recorder.last.headers["Authorization"] == "Bearer user-token"
    assert recorder.last_json() == {"refresh_token": "refresh"}


@pytest.mark.asyncio
async def test_exchange_code(supabase, recorder):
    recorder.respond(200, body=SESSION)

    await supabase.auth.exchange_code(ExchangeCodeOpts(auth_code="code", code_verifier="verifier"))

    assert recorder.last.url.params["grant_type"] == "pkce"
    assert recorder.last_json() == {"auth_code": "code", "code_verifier": "verifier"}


@pytest.mark.asyncio
async def test_exchange_code_error(supabase, recorder):
    recorder.respond(400, body={"msg": "invalid flow state"})

    with pytest.raises(AuthError, match="invalid flow state"):
        await supabase.auth.exchange_code(ExchangeCodeOpts(auth_code="c", code_verifier="v"))


@pytest.mark.asyncio
async def test_magic_link_and_errors(supabase, recorder):
    recorder.respond(200, body={})
    await supabase.auth.send_magic_link("a@b.c")
    assert str(recorder.last.url) == f"{URL}/auth/v1/magiclink"

    recorder.respond(429, body={"message": "rate limited"})
    with pytest.raises(AuthError, match="rate limited"):
        await supabase.auth.send_magic_link("a@b.c")


@pytest.mark.asyncio
async def test_user_and_update_user(supabase, recorder):
    recorder.respond(200, body={"id": "u1", "user_metadata": {"name": "Ann"}})

    user = await supabase.auth.user("token")
    assert user.user_metadata == {"name": "Ann"}
    assert recorder.last.method == "GET"
    assert recorder.last.headers["Authorization"] == "Bearer token"

    await supabase.auth.update_user("token", {"data": {"name": "Bob"}})
    assert recorder.last.method == "PUT"
    assert recorder.last_json() == {"data": {"name": "Bob"}}


@pytest.mark.asyncio
async def test_reset_password_for_email(supabase, recorder):
    recorder.respond(200, body={})

    await supabase.auth.reset_password_for_email("a@b.c", "https://app/reset")

    assert recorder.last.url.path == "/auth/v1/recover"
    assert recorder.last.url.params["redirect_to"] == "https://app/reset"


@pytest.mark.asyncio
async def test_sign_out(supabase, recorder):
    recorder.respond(204)
    await supabase.auth.sign_out("token")
    assert str(recorder.last.url) == f"{URL}/auth/v1/logout"
    assert recorder.last.headers["Authorization"] == "Bearer token"


@pytest.mark.asyncio
async def test_invite_user_by_email_with_data(supabase, recorder):
    recorder.respond(200, body={"id": "u9", "email": "new@b.c"})

    user = await supabase.auth.invite_user_by_email_with_data("new@b.c", {"team": "x"}, "https://app")

    assert user.id == "u9"
    assert recorder.last_json() == {"email": "new@b.c", "data": {"team": "x"}, "redirectTo": "https://app"}
    assert recorder.last.headers["Authorization"] == f"Bearer {KEY}"

    await supabase.auth.invite_user_by_email("other@b.c")
    assert recorder.last_json() == {"email": "other@b.c"}


def test_sign_in_with_provider_implicit(supabase):
    details = supabase.auth.sign_in_with_provider(
        ProviderSignInOptions(provider="github", redirect_to="https://app", scopes=["repo", "user"])
    )

    parsed = urlparse(details.url)
    query = parse_qs(parsed.query)
    assert parsed.path == "/auth/v1/authorize"
    assert query["provider"] == ["github"]
    assert query["scopes"] == ["repo user"]
    assert "code_challenge" not in query
    assert details.code_verifier == ""


def test_sign_in_with_provider_pkce(supabase):
    details = supabase.auth.sign_in_with_provider(
        ProviderSignInOptions(provider="google", flow_type=FlowType.PKCE)
    )

    query = parse_qs(urlparse(details.url).query)
    assert query["code_challenge_method"] == ["S256"]
    digest = hashlib.sha256(details.code_verifier.encode()).digest()
    expected = base64.urlsafe_b64encode(digest).rstrip(b"=").decode()
    assert query["code_challenge"] == [expected]


def test_generate_pkce_params():
    params = generate_pkce_params()
    assert len(params.verifier) == 43
    assert "=" not in params.verifier
    assert params.challenge_method == "S256"
    assert generate_pkce_params().verifier != params.verifier


def test_otp_payload():
    phone = VerifyPhoneOtpCredentials(phone="+15550100", type=PhoneOtpType.SMS, token="123456")
    assert otp_payload(phone) == {
        "phone": "+15550100",
        "type": "sms",
        "token": "123456",
        "token_hash": "",
    }

    email = VerifyEmailOtpCredentials(
        email="a@b.c", type=EmailOtpType.RECOVERY, token_hash="hash", redirect_to="https://app"
    )
    assert otp_payload(email)["type"] == "recovery"
    assert otp_payload(email)["redirect_to"] == "https://app"


@pytest.mark.asyncio
async def test_verify_otp(supabase, recorder):
    recorder.respond(200, body=SESSION)

    details = await supabase.auth.verify_otp(
        VerifyEmailOtpCredentials(email="a@b.c", type=EmailOtpType.EMAIL, token="123456")
    )

    assert details.access_token == "access"
    assert str(recorder.last.url) == f"{URL}/auth/v1/verify"
    assert recorder.last_json()["type"] == "email"
