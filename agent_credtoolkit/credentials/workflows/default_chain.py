"""Default discovery chain used when no explicit credentials are supplied."""
from typing import Optional

from ..domains.gcp_client import SecretManagerCredentialSource
from ..domains.sources import (
    CredentialChain,
    ConfigFileCredentialSource,
    EnvironmentCredentialSource,
)


def default_credential_chain(profile: Optional[str] = None, project_id: Optional[str] = None) -> CredentialChain:
    """
    Build the default discovery chain.

    Order:
    1. Environment variables (CREDTOOLKIT_IDENTIFIER / CREDTOOLKIT_SECRET)
    2. Config file profile (CREDTOOLKIT_PROFILE, default "default")
    3. GCP Secret Manager

    Args:
        profile: Config profile name (overrides CREDTOOLKIT_PROFILE)
        project_id: GCP project ID (overrides GCP_PROJECT and config file)

    Nothing is read until resolve() is called on the chain.
    """
    return CredentialChain([
        EnvironmentCredentialSource(),
        ConfigFileCredentialSource(profile=profile),
        SecretManagerCredentialSource(project_id=project_id),
    ])
