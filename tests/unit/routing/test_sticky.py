"""
粘性决策Cookie测试
"""

from bluegreen.config.router_config import DeploymentTargetId
from bluegreen.routing.sticky import (
    STICKY_COOKIE_NAME,
    STICKY_MAX_AGE,
    CookieDirective,
    StickyState,
    read_sticky_decision,
    write_sticky_decision,
)


class TestReadStickyDecision:
    """读取粘性Cookie测试"""

    def test_false_cookie(self):
        assert read_sticky_decision({"release_candidate": "false"}) is StickyState.SKIP_FALSE

    def test_true_cookie(self):
        assert read_sticky_decision({"release_candidate": "true"}) is StickyState.FORCE_TRUE

    def test_absent_cookie(self):
        assert read_sticky_decision({}) is StickyState.ABSENT
        assert read_sticky_decision({"other": "true"}) is StickyState.ABSENT

    def test_unrecognised_value_is_absent(self):
        """测试非true/false值视为没有Cookie"""
        assert read_sticky_decision({"release_candidate": "TRUE"}) is StickyState.ABSENT
        assert read_sticky_decision({"release_candidate": ""}) is StickyState.ABSENT


class TestWriteStickyDecision:
    """生成粘性Cookie测试"""

    def test_release_candidate_directive(self):
        directive = write_sticky_decision(DeploymentTargetId.RELEASE_CANDIDATE)

        assert directive == CookieDirective(STICKY_COOKIE_NAME, "true", STICKY_MAX_AGE, "/")
        assert STICKY_MAX_AGE == 86400

    def test_production_directive(self):
        directive = write_sticky_decision(DeploymentTargetId.PRODUCTION)
        assert directive.value == "false"

    def test_header_value(self):
        """测试渲染为单个Set-Cookie值"""
        value = write_sticky_decision(DeploymentTargetId.RELEASE_CANDIDATE).header_value()

        assert value.startswith("release_candidate=true")
        assert "Max-Age=86400" in value
        assert "Path=/" in value
        assert "," not in value
