"""
Pytest configuration and fixtures for hyperacc tests.

This module provides shared fixtures used across unit and integration tests.
"""

import tempfile
from pathlib import Path
from typing import Generator

import pytest

from hyperacc.identity import StaticIdentity
from hyperacc.rules import default_registry


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def clean_default_registry() -> Generator[None, None, None]:
    """Keep custom rules registered by one test out of the next."""
    default_registry.clear()
    yield
    default_registry.clear()


@pytest.fixture
def admin_identity() -> StaticIdentity:
    """An Org1MSP admin in the sales unit with a client platform type."""
    return StaticIdentity(
        organization_id="Org1MSP",
        id="x509::CN=alice::CN=ca.org1",
        organizational_units=["sales", "client"],
        attributes={"role": "admin", "hf.Type": "client", "dept": "eng"},
    )


@pytest.fixture
def no_role_identity() -> StaticIdentity:
    """An Org2MSP identity with no attributes at all."""
    return StaticIdentity(
        organization_id="Org2MSP",
        id="x509::CN=bob::CN=ca.org2",
        organizational_units=["peer"],
    )


@pytest.fixture
def sample_policy_yaml() -> str:
    """Return a simple policy YAML for testing."""
    return """
version: "1.0"
name: asset-transfer
rules:
  - kind: any_organization
    organizations: [Org1MSP, Org2MSP]
  - kind: or
    rules:
      - kind: role
        role: admin
      - kind: platform_admin
"""


@pytest.fixture
def sample_identity_yaml() -> str:
    """Return an identity YAML matching admin_identity."""
    return """
id: "x509::CN=alice::CN=ca.org1"
organization_id: Org1MSP
organizational_units: [sales]
attributes:
  role: admin
  hf.Type: client
"""
