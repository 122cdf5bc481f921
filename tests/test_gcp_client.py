"""Tests for the GCP Secret Manager client wrapper and credential source."""
import json
from unittest import mock

import pytest
import yaml
from google.api_core.exceptions import NotFound, PermissionDenied

from agent_credtoolkit.credentials.domains import gcp_client
from agent_credtoolkit.credentials.domains.errors import CredentialsUnavailable
from agent_credtoolkit.credentials.domains.gcp_client import (
    GCPSecretClient,
    SecretManagerCredentialSource,
)
from agent_credtoolkit.credentials.domains.models import CredentialPair
from agent_credtoolkit.credentials.domains.sources import CredentialChain, StaticCredentialSource


def _response(value: str):
    response = mock.Mock()
    response.payload.data = value.encode("UTF-8")
    return response


class FakeSecretClient:
    """Stands in for GCPSecretClient with an in-memory secret store."""

    def __init__(self, secrets):
        self.secrets = secrets
        self.requests = []

    def fetch_secret(self, secret_name, project_id):
        self.requests.append((project_id, secret_name))
        return self.secrets.get((project_id, secret_name))


class TestGCPSecretClient:
    def test_fetch_secret_decodes_payload(self):
        with mock.patch.object(gcp_client.secretmanager, "SecretManagerServiceClient") as client_cls:
            client_cls.return_value.access_secret_version.return_value = _response("value-1")

            value = GCPSecretClient().fetch_secret("MY_SECRET", "my-project")

        assert value == "value-1"
        client_cls.return_value.access_secret_version.assert_called_once_with(
            request={"name": "projects/my-project/secrets/MY_SECRET/versions/latest"}
        )

    @pytest.mark.parametrize("error", [NotFound("missing"), PermissionDenied("denied")])
    def test_fetch_secret_returns_none_on_api_error(self, error, caplog):
        with mock.patch.object(gcp_client.secretmanager, "SecretManagerServiceClient") as client_cls:
            client_cls.return_value.access_secret_version.side_effect = error

            assert GCPSecretClient().fetch_secret("MY_SECRET", "my-project") is None

        assert "GCP fetch failed for MY_SECRET" in caplog.text

    def test_fetch_secret_returns_none_for_non_utf8_payload(self, caplog):
        """A stored value that is not UTF-8 is treated as unreadable."""
        with mock.patch.object(gcp_client.secretmanager, "SecretManagerServiceClient") as client_cls:
            response = mock.Mock()
            response.payload.data = b"\xff\xfe\x00bad"
            client_cls.return_value.access_secret_version.return_value = response

            assert GCPSecretClient().fetch_secret("MY_SECRET", "my-project") is None

        assert "not valid UTF-8" in caplog.text

    def test_client_created_lazily_once(self):
        with mock.patch.object(gcp_client.secretmanager, "SecretManagerServiceClient") as client_cls:
            wrapper = GCPSecretClient()
            client_cls.assert_not_called()

            assert wrapper.client is wrapper.client
            client_cls.assert_called_once_with()

    def test_client_uses_service_account_file(self):
        with mock.patch.object(gcp_client.secretmanager, "SecretManagerServiceClient") as client_cls:
            wrapper = GCPSecretClient(service_account_path="/tmp/sa.json")

            assert wrapper.client is client_cls.from_service_account_file.return_value
            client_cls.from_service_account_file.assert_called_once_with("/tmp/sa.json")


class TestSecretManagerCredentialSource:
    def test_resolves_from_explicit_settings(self):
        fake = FakeSecretClient({
            ("my-project", "ID_SECRET"): "SM_ID",
            ("my-project", "KEY_SECRET"): "sm-secret",
        })
        source = SecretManagerCredentialSource(
            project_id="my-project",
            identifier_secret="ID_SECRET",
            secret_secret="KEY_SECRET",
            client=fake,
        )

        assert source.resolve() == CredentialPair("SM_ID", "sm-secret")
        assert fake.requests == [("my-project", "ID_SECRET"), ("my-project", "KEY_SECRET")]

    def test_project_from_environment_and_default_secret_names(self, temp_home, monkeypatch):
        monkeypatch.setenv("GCP_PROJECT", "env-project")
        fake = FakeSecretClient({
            ("env-project", "CREDTOOLKIT_IDENTIFIER"): "SM_ID",
            ("env-project", "CREDTOOLKIT_SECRET"): "sm-secret",
        })

        pair = SecretManagerCredentialSource(client=fake).resolve()

        assert pair == CredentialPair("SM_ID", "sm-secret")

    def test_settings_from_config_file(self, temp_config_dir, tmp_path):
        sa_file = tmp_path / "sa.json"
        sa_file.write_text(json.dumps({"type": "service_account"}))
        with open(temp_config_dir / "config.yml", 'w') as f:
            yaml.dump({"secret_manager": {
                "project_id": "cfg-project",
                "identifier_secret": "CFG_ID_SECRET",
                "secret_secret": "CFG_KEY_SECRET",
                "service_account_path": str(sa_file),
            }}, f)
        fake = FakeSecretClient({
            ("cfg-project", "CFG_ID_SECRET"): "SM_ID",
            ("cfg-project", "CFG_KEY_SECRET"): "sm-secret",
        })

        pair = SecretManagerCredentialSource(client=fake).resolve()

        assert pair == CredentialPair("SM_ID", "sm-secret")

    def test_service_account_from_config_used_for_client(self, temp_config_dir, tmp_path):
        sa_file = tmp_path / "sa.json"
        sa_file.write_text(json.dumps({"type": "service_account"}))
        with open(temp_config_dir / "config.yml", 'w') as f:
            yaml.dump({"secret_manager": {
                "project_id": "cfg-project",
                "service_account_path": str(sa_file),
            }}, f)

        with mock.patch.object(gcp_client.secretmanager, "SecretManagerServiceClient") as client_cls:
            client = client_cls.from_service_account_file.return_value
            client.access_secret_version.side_effect = [_response("SM_ID"), _response("sm-secret")]

            pair = SecretManagerCredentialSource().resolve()

        assert pair == CredentialPair("SM_ID", "sm-secret")
        client_cls.from_service_account_file.assert_called_once_with(str(sa_file))

    def test_missing_project_raises_unavailable(self, temp_home):
        fake = FakeSecretClient({})

        with pytest.raises(CredentialsUnavailable, match="project ID"):
            SecretManagerCredentialSource(client=fake).resolve()
        assert fake.requests == []

    def test_missing_secret_raises_unavailable(self):
        fake = FakeSecretClient({("my-project", "ID_SECRET"): "SM_ID"})
        source = SecretManagerCredentialSource(
            project_id="my-project",
            identifier_secret="ID_SECRET",
            secret_secret="KEY_SECRET",
            client=fake,
        )

        with pytest.raises(CredentialsUnavailable, match="KEY_SECRET"):
            source.resolve()

    def test_blank_secret_payload_raises_unavailable(self):
        fake = FakeSecretClient({
            ("my-project", "ID_SECRET"): "SM_ID",
            ("my-project", "KEY_SECRET"): "   ",
        })
        source = SecretManagerCredentialSource(
            project_id="my-project",
            identifier_secret="ID_SECRET",
            secret_secret="KEY_SECRET",
            client=fake,
        )

        with pytest.raises(CredentialsUnavailable):
            source.resolve()

    def test_non_utf8_payload_lets_chain_continue(self):
        """An undecodable secret fails this source only; later sources still run."""
        with mock.patch.object(gcp_client.secretmanager, "SecretManagerServiceClient") as client_cls:
            response = mock.Mock()
            response.payload.data = b"\xff\xfe\x00bad"
            client_cls.return_value.access_secret_version.return_value = response
            chain = CredentialChain([
                SecretManagerCredentialSource(
                    project_id="my-project",
                    identifier_secret="ID_SECRET",
                    secret_secret="KEY_SECRET",
                ),
                StaticCredentialSource("LATER", "later-secret"),
            ])

            pair = chain.resolve()

        assert pair == CredentialPair("LATER", "later-secret")

    def test_malformed_service_account_file_raises_unavailable(self, tmp_path):
        """A service account file that is not JSON fails with CredentialsUnavailable."""
        sa_file = tmp_path / "sa.json"
        sa_file.write_text("{not json")
        source = SecretManagerCredentialSource(
            project_id="my-project",
            identifier_secret="ID_SECRET",
            secret_secret="KEY_SECRET",
            service_account_path=str(sa_file),
        )

        with pytest.raises(CredentialsUnavailable, match="Unable to create Secret Manager client") as exc_info:
            source.resolve()

        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_missing_service_account_file_raises_unavailable(self, tmp_path):
        source = SecretManagerCredentialSource(
            project_id="my-project",
            identifier_secret="ID_SECRET",
            secret_secret="KEY_SECRET",
            service_account_path=str(tmp_path / "missing.json"),
        )

        with pytest.raises(CredentialsUnavailable):
            source.resolve()

    def test_broken_secret_manager_section_raises_unavailable(self, temp_config_dir):
        with open(temp_config_dir / "config.yml", 'w') as f:
            yaml.dump({"secret_manager": {
                "project_id": "cfg-project",
                "service_account_path": "/nonexistent/sa.json",
            }}, f)

        with pytest.raises(CredentialsUnavailable, match="Service account file not found"):
            SecretManagerCredentialSource().resolve()

    def test_client_reused_across_resolves(self):
        """One source builds one Secret Manager client, not one per resolve()."""
        with mock.patch.object(gcp_client.secretmanager, "SecretManagerServiceClient") as client_cls:
            client_cls.return_value.access_secret_version.side_effect = [
                _response("SM_ID"), _response("sm-secret"),
                _response("SM_ID"), _response("sm-secret"),
            ]
            source = SecretManagerCredentialSource(
                project_id="my-project",
                identifier_secret="ID_SECRET",
                secret_secret="KEY_SECRET",
            )

            first = source.resolve()
            second = source.resolve()

        assert first == second == CredentialPair("SM_ID", "sm-secret")
        client_cls.assert_called_once_with()
