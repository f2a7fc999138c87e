"""Tests for location parsing and environment resolution."""

import pytest

from swiftstore.domain.config import (
    BackendConfig,
    ConfigParseError,
    HostNotSupportedError,
    MissingContainerError,
    apply_environment,
    parse_config,
    resolve_config,
)


@pytest.mark.parametrize(
    ("location", "container", "prefix"),
    [
        ("swift:///cnt1", "cnt1", ""),
        ("swift:///cnt2/", "cnt2", ""),
        ("swift:///cnt3/prefix", "cnt3", "prefix"),
        ("swift:///cnt4/prefix/longer", "cnt4", "prefix/longer"),
        ("swift:///cnt5/prefix?params", "cnt5", "prefix"),
        ("swift:///cnt6/prefix#params", "cnt6", "prefix"),
    ],
)
def test_parse_config(location, container, prefix):
    cfg = parse_config(location)

    assert cfg == BackendConfig(container=container, prefix=prefix)


@pytest.mark.parametrize(
    ("location", "error"),
    [
        ("swift://hostname/container", HostNotSupportedError),
        ("swift:////", MissingContainerError),
        ("swift://", ConfigParseError),
        ("swift:////prefix", MissingContainerError),
        ("swift:container", ConfigParseError),
        ("not a url", ConfigParseError),
    ],
)
def test_parse_config_invalid(location, error):
    with pytest.raises(error):
        parse_config(location)


def test_parse_errors_are_value_errors():
    with pytest.raises(ValueError, match="hostname"):
        parse_config("swift://hostname/container")


def test_empty_container_rejected_on_construction():
    with pytest.raises(MissingContainerError):
        BackendConfig(container="")


def test_secrets_hidden_from_repr():
    cfg = BackendConfig(container="c", api_key="s3cret", auth_token="t0ken")

    assert "s3cret" not in repr(cfg)
    assert "t0ken" not in repr(cfg)


class TestApplyEnvironment:
    """Test filling credentials from environment variables."""

    @pytest.fixture
    def cfg(self):
        return BackendConfig(container="cnt", prefix="pre")

    def test_v3_variables(self, cfg):
        env = {
            "OS_USERNAME": "user",
            "OS_PASSWORD": "secret",
            "OS_REGION_NAME": "RegionOne",
            "OS_AUTH_URL": "https://keystone/v3",
            "OS_USER_DOMAIN_NAME": "Default",
            "OS_PROJECT_NAME": "project",
            "OS_PROJECT_DOMAIN_NAME": "ProjectDomain",
        }

        result = apply_environment(cfg, env)

        assert result.user_name == "user"
        assert result.api_key == "secret"
        assert result.region == "RegionOne"
        assert result.auth_url == "https://keystone/v3"
        assert result.domain == "Default"
        assert result.tenant == "project"
        assert result.tenant_domain == "ProjectDomain"
        assert result.container == "cnt"
        assert result.prefix == "pre"

    def test_project_name_wins_over_tenant_name(self, cfg):
        env = {"OS_PROJECT_NAME": "project", "OS_TENANT_NAME": "tenant"}

        assert apply_environment(cfg, env).tenant == "project"

    def test_v2_tenant_variables(self, cfg):
        env = {"OS_TENANT_ID": "tid", "OS_TENANT_NAME": "tenant"}

        result = apply_environment(cfg, env)

        assert result.tenant_id == "tid"
        assert result.tenant == "tenant"

    def test_v1_variables_only_fill_gaps(self, cfg):
        env = {
            "OS_USERNAME": "v2user",
            "ST_AUTH": "https://swift/auth/v1.0",
            "ST_USER": "v1user",
            "ST_KEY": "v1key",
        }

        result = apply_environment(cfg, env)

        assert result.user_name == "v2user"
        assert result.auth_url == "https://swift/auth/v1.0"
        assert result.api_key == "v1key"

    def test_explicit_values_are_never_overwritten(self):
        cfg = BackendConfig(container="cnt", user_name="explicit", region="mine")
        env = {"OS_USERNAME": "env-user", "ST_USER": "st-user", "OS_REGION_NAME": "r"}

        result = apply_environment(cfg, env)

        assert result.user_name == "explicit"
        assert result.region == "mine"

    def test_empty_variables_are_ignored(self, cfg):
        env = {"OS_AUTH_URL": "", "ST_AUTH": "https://swift/auth/v1.0"}

        assert apply_environment(cfg, env).auth_url == "https://swift/auth/v1.0"

    def test_manual_authentication(self, cfg):
        env = {"OS_STORAGE_URL": "https://swift/v1/AUTH_x", "OS_AUTH_TOKEN": "tok"}

        result = apply_environment(cfg, env)

        assert result.storage_url == "https://swift/v1/AUTH_x"
        assert result.auth_token == "tok"
        assert result.pre_authenticated

    def test_token_alone_is_not_pre_authenticated(self, cfg):
        result = apply_environment(cfg, {"OS_AUTH_TOKEN": "tok"})

        assert not result.pre_authenticated

    def test_default_container_policy(self, cfg):
        env = {"SWIFT_DEFAULT_CONTAINER_POLICY": "gold"}

        assert apply_environment(cfg, env).default_container_policy == "gold"

    def test_returns_new_instance(self, cfg):
        result = apply_environment(cfg, {"OS_USERNAME": "user"})

        assert cfg.user_name == ""
        assert result is not cfg

    def test_reads_process_environment_by_default(self, cfg, monkeypatch):
        monkeypatch.setenv("OS_REGION_NAME", "from-env")

        assert apply_environment(cfg).region == "from-env"


def test_resolve_config():
    cfg = resolve_config("swift:///cnt/some/prefix", {"ST_USER": "user"})

    assert cfg.container == "cnt"
    assert cfg.prefix == "some/prefix"
    assert cfg.user_name == "user"
