"""Tests for authorization policies"""

import pytest

from agent_router.core.authorization import (
    AccessRequest,
    AllowAllPolicy,
    CapabilityPolicy,
    DenyAllPolicy,
    GrantPolicy,
    build_policy,
    normalize_capability,
)
from agent_router.core.models import ContextDefinition


def make_request(context: ContextDefinition, agent_id: str = "agent-1", capabilities=None) -> AccessRequest:
    return AccessRequest(
        agent_id=agent_id,
        agent_name="Test Agent",
        context=context,
        capabilities=capabilities if capabilities is not None else ["Token Swaps"],
    )


@pytest.fixture
def guarded_context() -> ContextDefinition:
    return ContextDefinition(
        id="pyth-price-feeds",
        name="Pyth",
        type="oracle",
        capabilities=["price_monitoring"],
        authRequired=True,
    )


class TestNormalizeCapability:

    def test_human_readable_to_tag(self):
        assert normalize_capability("Token Swaps") == "token_swaps"
        assert normalize_capability("  Price   Monitoring ") == "price_monitoring"
        assert normalize_capability("token_swaps") == "token_swaps"


class TestSimplePolicies:

    @pytest.mark.asyncio
    async def test_deny_all(self, jupiter):
        assert await DenyAllPolicy().is_allowed(make_request(jupiter)) is False

    @pytest.mark.asyncio
    async def test_allow_all(self, jupiter):
        assert await AllowAllPolicy().is_allowed(make_request(jupiter)) is True


class TestCapabilityPolicy:
    """Test capability overlap and trusted-agent gating"""

    @pytest.mark.asyncio
    async def test_overlap_allows(self, jupiter):
        assert await CapabilityPolicy().is_allowed(make_request(jupiter)) is True

    @pytest.mark.asyncio
    async def test_no_overlap_denies(self, jupiter):
        request = make_request(jupiter, capabilities=["NFT Listing"])
        assert await CapabilityPolicy().is_allowed(request) is False

    @pytest.mark.asyncio
    async def test_no_capabilities_denies(self, jupiter):
        request = make_request(jupiter, capabilities=[])
        assert await CapabilityPolicy().is_allowed(request) is False

    @pytest.mark.asyncio
    async def test_auth_required_needs_trusted_agent(self, guarded_context):
        request = make_request(guarded_context, capabilities=["Price Monitoring"])

        assert await CapabilityPolicy().is_allowed(request) is False
        assert await CapabilityPolicy(trusted_agents=["agent-1"]).is_allowed(request) is True


class TestGrantPolicy:
    """Test explicit grants"""

    @pytest.mark.asyncio
    async def test_no_grants_denies(self, jupiter):
        assert await GrantPolicy().is_allowed(make_request(jupiter)) is False

    @pytest.mark.asyncio
    async def test_grant_by_id(self, jupiter, magic_eden):
        policy = GrantPolicy({"agent-1": ["jupiter-dex-v4"]})

        assert await policy.is_allowed(make_request(jupiter)) is True
        assert await policy.is_allowed(make_request(magic_eden)) is False

    @pytest.mark.asyncio
    async def test_grant_by_type_and_wildcard(self, jupiter, magic_eden):
        policy = GrantPolicy()
        policy.grant("agent-1", "type:nft_marketplace")
        policy.grant("admin", "*")

        assert await policy.is_allowed(make_request(magic_eden)) is True
        assert await policy.is_allowed(make_request(jupiter)) is False
        assert await policy.is_allowed(make_request(jupiter, agent_id="admin")) is True

    @pytest.mark.asyncio
    async def test_revoke(self, jupiter):
        policy = GrantPolicy({"agent-1": ["jupiter-dex-v4"]})
        policy.revoke("agent-1", "jupiter-dex-v4")

        assert await policy.is_allowed(make_request(jupiter)) is False


class TestBuildPolicy:

    def test_by_name(self):
        assert isinstance(build_policy("deny"), DenyAllPolicy)
        policy = build_policy("capability", trusted_agents=["a"])
        assert isinstance(policy, CapabilityPolicy)
        assert policy.trusted_agents == {"a"}

    def test_unknown_name(self):
        with pytest.raises(ValueError):
            build_policy("everyone")
