# tawsila_admin/services/agent_service.py
from typing import Any, Dict, List

from tawsila_admin.core.http_client import ApiClient

SHIPPING_AGENT_ROLE = "shipping-agent"


def is_shipping_agent(user: Dict[str, Any]) -> bool:
    roles = user.get("roles")
    if not isinstance(roles, list):
        return False
    return any(isinstance(role, dict) and role.get("name") == SHIPPING_AGENT_ROLE for role in roles)


async def fetch_agents(client: ApiClient) -> List[Dict[str, Any]]:
    """Every user the platform offers for assignment"""
    response = await client.get("/get-users")
    return response.get("data") or []


async def fetch_active_agents(client: ApiClient) -> List[Dict[str, Any]]:
    """Active users holding the shipping-agent role, for the assign-agent dialogs"""
    response = await client.get("/get-users?filter[status]=active")
    return [user for user in response.get("data") or [] if is_shipping_agent(user)]
