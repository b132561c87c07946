"""
Admin - user management through the GoTrue admin API.
"""

from typing import TYPE_CHECKING

from .constants import ADMIN_ENDPOINT
from .types import (
    AdminUser,
    AdminUserParams,
    GenerateLinkParams,
    GenerateLinkResponse,
    from_dict,
    to_dict,
)

if TYPE_CHECKING:
    from .client import Client


class Admin:
    """Admin operations, authorised with the service role key."""

    def __init__(self, client: "Client", service_key: str):
        self.client = client
        self.service_key = service_key

    @property
    def url(self) -> str:
        return self.client.endpoint(ADMIN_ENDPOINT)

    async def get_user(self, user_id: str) -> AdminUser:
        data = await self.client.send_json(
            "GET", f"{self.url}/users/{user_id}", token=self.service_key
        )
        return from_dict(AdminUser, data)

    async def create_user(self, params: AdminUserParams) -> AdminUser:
        data = await self.client.send_json(
            "POST", f"{self.url}/users", json_body=to_dict(params), token=self.service_key
        )
        return from_dict(AdminUser, data)

    async def update_user(self, user_id: str, params: AdminUserParams) -> AdminUser:
        data = await self.client.send_json(
            "PUT",
            f"{self.url}/users/{user_id}",
            json_body=to_dict(params),
            token=self.service_key,
        )
        return from_dict(AdminUser, data)

    async def generate_link(self, params: GenerateLinkParams) -> GenerateLinkResponse:
        """Generate an email action link (signup, invite, magiclink, recovery...)."""
        data = await self.client.send_json(
            "POST",
            f"{self.url}/generate_link",
            json_body=to_dict(params),
            token=self.service_key,
        )
        return from_dict(GenerateLinkResponse, data)
