"""
环境变量覆盖测试
"""

from unittest.mock import patch

from bluegreen.config.env_override import EnvironmentOverrideManager, OverrideRule, OverrideType


class TestEnvironmentOverrideManager:
    """环境变量覆盖管理器测试"""

    def test_no_environment_no_overrides(self):
        assert EnvironmentOverrideManager(environ={}).get_overrides() == {}

    def test_typed_conversion(self):
        manager = EnvironmentOverrideManager(environ={
            "BLUEGREEN_RC_WEIGHT_PERCENT": "30",
            "BLUEGREEN_UPSTREAM_TIMEOUT": "1.5",
            "BLUEGREEN_INFRASTRUCTURE_USER_AGENTS": "vercel, uptimerobot ,",
            "BLUEGREEN_PORT": "8081",
        })

        assert manager.get_overrides() == {
            "split": {"rc_weight_percent": 30},
            "proxy": {"timeout": 1.5},
            "classifier": {"infrastructure_user_agents": ["vercel", "uptimerobot"]},
            "server": {"port": 8081},
        }

    def test_invalid_value_is_ignored(self):
        manager = EnvironmentOverrideManager(environ={"BLUEGREEN_RC_WEIGHT_PERCENT": "ten"})

        with patch.object(manager, "logger") as logger:
            assert manager.get_overrides() == {}

        logger.warning.assert_called_once()

    def test_custom_prefix_and_rule(self):
        manager = EnvironmentOverrideManager(prefix="SITE_", environ={
            "SITE_RC_WEIGHT_PERCENT": "5",
            "SITE_FEATURE_FLAGS": '{"beta": true}',
            "SITE_JSON_LOGS": "yes",
        })
        manager.register_override_rule(OverrideRule("features", "SITE_FEATURE_FLAGS", OverrideType.JSON))
        manager.register_override_rule(OverrideRule("logging.json", "SITE_JSON_LOGS", OverrideType.BOOLEAN))

        overrides = manager.get_overrides()

        assert overrides["split"] == {"rc_weight_percent": 5}
        assert overrides["features"] == {"beta": True}
        assert overrides["logging"] == {"json": True}

    def test_env_template_lists_every_variable(self):
        manager = EnvironmentOverrideManager(environ={})
        template = manager.generate_env_template()

        for env_var in manager.list_env_vars():
            assert f"# {env_var}=" in template
