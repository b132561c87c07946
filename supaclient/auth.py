"""
Auth - client for the GoTrue authentication API.
"""

import base64
import hashlib
import secrets
from typing import TYPE_CHECKING, Any, Dict, Optional, Union
from urllib.parse import urlencode

from .constants import AUTH_ENDPOINT
from .errors import AuthError
from .types import (
    AuthenticatedDetails,
    ExchangeCodeOpts,
    FlowType,
    PKCEParams,
    ProviderSignInDetails,
    ProviderSignInOptions,
    User,
    UserCredentials,
    VerifyEmailOtpCredentials,
    VerifyPhoneOtpCredentials,
    VerifyTokenHashOtpCredentials,
    from_dict,
    to_dict,
)

if TYPE_CHECKING:
    from .client import Client

VerifyOtpCredentials = Union[
    VerifyPhoneOtpCredentials,
    VerifyEmailOtpCredentials,
    VerifyTokenHashOtpCredentials,
]


def generate_pkce_params() -> PKCEParams:
    """Create a PKCE verifier and its S256 challenge."""
    # url-safe base64 without padding, as required for code verifiers
    verifier = base64.urlsafe_b64encode(secrets.token_bytes(32)).rstrip(b"=").decode()
    digest = hashlib.sha256(verifier.encode()).digest()
    challenge = base64.urlsafe_b64encode(digest).rstrip(b"=").decode()
    return PKCEParams(challenge=challenge, challenge_method="S256", verifier=verifier)


def otp_payload(credentials: VerifyOtpCredentials) -> Dict[str, Any]:
    """JSON body for /verify; redirect_to is only sent when set."""
    payload = to_dict(credentials)
    payload["type"] = getattr(credentials.type, "value", credentials.type)
    if not payload.get("redirect_to"):
        payload.pop("redirect_to", None)
    return payload


class Auth:
    """Authentication client for Supabase-compatible auth."""

    def __init__(self, client: "Client"):
        self.client = client

    @property
    def url(self) -> str:
        return self.client.endpoint(AUTH_ENDPOINT)

    async def _authenticate(self, path: str, body: Dict[str, Any], token: Optional[str] = None):
        data = await self.client.send_json(
            "POST",
            f"{self.url}/{path}",
            json_body=body,
            token=token,
            error_cls=AuthError,
        )
        return AuthenticatedDetails.from_dict(data or {})

    # =========================================================================
    # Sign Up / Sign In
    # =========================================================================

    async def sign_up(self, credentials: UserCredentials) -> User:
        """Register an email and password."""
        data = await self.client.send_json(
            "POST",
            f"{self.url}/signup",
            json_body=to_dict(credentials),
            error_cls=AuthError,
        )
        return from_dict(User, data)

    async def sign_in(self, credentials: UserCredentials) -> AuthenticatedDetails:
        """Sign in with email and password."""
        return await self._authenticate(
            "token?grant_type=password",
            {"email": credentials.email, "password": credentials.password},
        )

    async def refresh_user(self, user_token: str, refresh_token: str) -> AuthenticatedDetails:
        """Exchange a refresh token for a new access token."""
        return await self._authenticate(
            "token?grant_type=refresh_token",
            {"refresh_token": refresh_token},
            token=user_token,
        )

    async def exchange_code(self, opts: ExchangeCodeOpts) -> AuthenticatedDetails:
        """Exchange a PKCE auth code and verifier for a session."""
        return await self._authenticate("token?grant_type=pkce", to_dict(opts))

    async def send_magic_link(self, email: str) -> None:
        """Send a passwordless sign-in link."""
        await self.client.send(
            "POST", f"{self.url}/magiclink", json_body={"email": email}, error_cls=AuthError
        )

    def sign_in_with_provider(self, opts: ProviderSignInOptions) -> ProviderSignInDetails:
        """
        Build the OAuth authorize URL for a provider. No request is sent.

        With the PKCE flow the returned details carry the code verifier that
        must later be passed to exchange_code.
        """
        params = {
            "provider": opts.provider,
            "redirect_to": opts.redirect_to,
            "scopes": " ".join(opts.scopes),
        }

        if opts.flow_type == FlowType.PKCE:
            pkce = generate_pkce_params()
            params["code_challenge"] = pkce.challenge
            params["code_challenge_method"] = pkce.challenge_method
            return ProviderSignInDetails(
                url=f"{self.url}/authorize?{urlencode(params)}",
                provider=opts.provider,
                code_verifier=pkce.verifier,
            )

        return ProviderSignInDetails(
            url=f"{self.url}/authorize?{urlencode(params)}",
            provider=opts.provider,
        )

    async def verify_otp(self, credentials: VerifyOtpCredentials) -> AuthenticatedDetails:
        """Verify a one-time password or token hash."""
        return await self._authenticate("verify", otp_payload(credentials))

    # =========================================================================
    # User Management
    # =========================================================================

    async def user(self, user_token: str) -> User:
        """Get the user owning the token."""
        data = await self.client.send_json(
            "GET", f"{self.url}/user", token=user_token, error_cls=AuthError
        )
        return from_dict(User, data)

    async def update_user(self, user_token: str, update_data: Dict[str, Any]) -> User:
        data = await self.client.send_json(
            "PUT",
            f"{self.url}/user",
            json_body=update_data,
            token=user_token,
            error_cls=AuthError,
        )
        return from_dict(User, data)

    async def reset_password_for_email(self, email: str, redirect_to: str = "") -> None:
        """Send a password recovery link."""
        params = {"redirect_to": redirect_to} if redirect_to else None
        await self.client.send(
            "POST",
            f"{self.url}/recover",
            json_body={"email": email},
            params=params,
            error_cls=AuthError,
        )

    async def sign_out(self, user_token: str) -> None:
        """Revoke the user's token and session."""
        await self.client.send(
            "POST",
            f"{self.url}/logout",
            headers={"Content-Type": "application/json"},
            token=user_token,
            error_cls=AuthError,
        )

    async def invite_user_by_email_with_data(
        self,
        email: str,
        data: Optional[Dict[str, Any]] = None,
        redirect_to: str = "",
    ) -> User:
        """Send an invite link carrying user metadata. Requires the service key."""
        body: Dict[str, Any] = {"email": email}
        if data is not None:
            body["data"] = data
        if redirect_to:
            body["redirectTo"] = redirect_to

        result = await self.client.send_json(
            "POST",
            f"{self.url}/invite",
            json_body=body,
            token=self.client.supabase_key,
            error_cls=AuthError,
        )
        return from_dict(User, result)

    async def invite_user_by_email(self, email: str) -> User:
        return await self.invite_user_by_email_with_data(email)
