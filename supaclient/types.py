"""
Type definitions for the auth, admin and storage APIs.
"""

from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Optional, Type, TypeVar

T = TypeVar("T")

JSONMap = Dict[str, Any]


def from_dict(cls: Type[T], data: Optional[Dict[str, Any]]) -> T:
    """Build a dataclass from a JSON object, ignoring unknown keys."""
    data = data or {}
    known = {f.name for f in fields(cls)}
    return cls(**{key: value for key, value in data.items() if key in known})


def to_dict(obj: Any) -> Dict[str, Any]:
    """Serialize a dataclass to a JSON-ready dict."""
    return asdict(obj)


# =============================================================================
# Auth
# =============================================================================


@dataclass
class User:
    """User model matching the GoTrue schema."""
    id: str = ""
    aud: str = ""
    role: str = ""
    email: str = ""
    phone: str = ""
    invited_at: Optional[str] = None
    confirmed_at: Optional[str] = None
    confirmation_sent_at: Optional[str] = None
    email_confirmed_at: Optional[str] = None
    last_sign_in_at: Optional[str] = None
    app_metadata: JSONMap = field(default_factory=dict)
    user_metadata: JSONMap = field(default_factory=dict)
    identities: List[JSONMap] = field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class UserCredentials:
    email: str
    password: str
    data: Optional[JSONMap] = None


@dataclass
class AuthenticatedDetails:
    """Tokens returned by a successful sign-in, refresh or verification."""
    access_token: str = ""
    token_type: str = "bearer"
    expires_in: int = 0
    expires_at: Optional[int] = None
    refresh_token: str = ""
    user: Optional[User] = None
    provider_token: str = ""
    provider_refresh_token: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuthenticatedDetails":
        details = from_dict(cls, data)
        if isinstance(details.user, dict):
            details.user = from_dict(User, details.user)
        return details


class FlowType(str, Enum):
    IMPLICIT = "implicit"
    PKCE = "pkce"


@dataclass
class ProviderSignInOptions:
    provider: str
    redirect_to: str = ""
    scopes: List[str] = field(default_factory=list)
    flow_type: FlowType = FlowType.IMPLICIT


@dataclass
class ProviderSignInDetails:
    url: str
    provider: str
    code_verifier: str = ""


@dataclass
class PKCEParams:
    challenge: str
    challenge_method: str
    verifier: str


@dataclass
class ExchangeCodeOpts:
    auth_code: str
    code_verifier: str


class PhoneOtpType(str, Enum):
    SMS = "sms"
    PHONE_CHANGE = "phone_change"


class EmailOtpType(str, Enum):
    EMAIL = "email"
    RECOVERY = "recovery"
    INVITE = "invite"
    EMAIL_CHANGE = "email_change"


@dataclass
class VerifyPhoneOtpCredentials:
    """OTP sent to a phone number."""
    phone: str
    type: PhoneOtpType
    token: str = ""
    token_hash: str = ""
    redirect_to: str = ""


@dataclass
class VerifyEmailOtpCredentials:
    """OTP sent to an email address."""
    email: str
    type: EmailOtpType
    token: str = ""
    token_hash: str = ""
    redirect_to: str = ""


@dataclass
class VerifyTokenHashOtpCredentials:
    """OTP delivered by any other channel, identified by its token hash."""
    token_hash: str
    type: str
    redirect_to: str = ""


# =============================================================================
# Admin
# =============================================================================


@dataclass
class AdminUser(User):
    """User as seen through the admin API."""
    phone_confirmed_at: Optional[str] = None
    recovery_sent_at: Optional[str] = None
    new_email: str = ""
    email_change_sent_at: Optional[str] = None
    new_phone: str = ""
    phone_change_sent_at: Optional[str] = None
    reauthentication_sent_at: Optional[str] = None
    factors: List[JSONMap] = field(default_factory=list)
    banned_until: Optional[str] = None
    deleted_at: Optional[str] = None


@dataclass
class AdminUserParams:
    role: str = ""
    email: str = ""
    phone: str = ""
    password: Optional[str] = None
    email_confirm: bool = False
    phone_confirm: bool = False
    user_metadata: Optional[JSONMap] = None
    app_metadata: Optional[JSONMap] = None
    ban_duration: str = ""


@dataclass
class GenerateLinkParams:
    type: str
    email: str
    new_email: str = ""
    password: str = ""
    data: Optional[JSONMap] = None
    redirect_to: str = ""


@dataclass
class GenerateLinkResponse(AdminUser):
    action_link: str = ""
    email_otp: str = ""
    hashed_token: str = ""
    verification_type: str = ""
    redirect_to: str = ""


# =============================================================================
# Storage
# =============================================================================


@dataclass
class Bucket:
    id: str = ""
    name: str = ""
    owner: str = ""
    public: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class BucketOption:
    id: str
    name: str
    public: bool = False


@dataclass
class SortBy:
    column: str = "name"
    order: str = "asc"


@dataclass
class FileSearchOptions:
    limit: int = 100
    offset: int = 0
    sort_by: SortBy = field(default_factory=SortBy)


@dataclass
class FileUploadOptions:
    cache_control: str = "3600"
    content_type: str = "text/plain;charset=UTF-8"
    upsert: bool = False


@dataclass
class FileObject:
    name: str = ""
    bucket_id: str = ""
    owner: str = ""
    id: Optional[str] = None
    updated_at: Optional[str] = None
    created_at: Optional[str] = None
    last_accessed_at: Optional[str] = None
    metadata: Optional[JSONMap] = None
    buckets: Optional[JSONMap] = None


@dataclass
class FileResponse:
    key: str = ""
    message: str = ""
