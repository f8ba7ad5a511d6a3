"""Tests for the dispatcher state machine and fallback walk."""

import pytest

from nanorouter.config.schema import RouterConfig
from nanorouter.router.classifier import PromptAnalyzer
from nanorouter.router.dispatcher import Dispatcher
from nanorouter.router.models import RoutingProfile, Tier
from nanorouter.router.session import SessionStore

SIMPLE = "Hello!"
MODERATE = "prove this function class works: foo()"
BORDERLINE = "why prove this function class works: foo()?"
PROOF = "Prove step by step that the theorem holds"


@pytest.fixture
def sessions(clock, audit):
    return SessionStore(capacity=100, ttl_seconds=60, clock=clock, audit=audit)


def make(config, sessions, audit, profile=None):
    if profile is not None:
        config = config.model_copy(update={"active_profile": profile})
    return PromptAnalyzer(config, audit=audit), Dispatcher(config, sessions=sessions, audit=audit)


class TestFullClassification:
    """Test routing without a session."""

    def test_simple_prompt(self, config, sessions, audit):
        """Test a greeting routes to the efficient primary."""
        analyzer, dispatcher = make(config, sessions, audit)
        decision = dispatcher.route(analyzer.analyze(SIMPLE))
        assert decision.target == "eff-1"
        assert decision.tier is Tier.EFFICIENT
        assert decision.fallbacks == ("eff-2",)
        assert decision.pinned is False
        assert decision.profile is RoutingProfile.BALANCED
        assert decision.reason.endswith("no significant signals detected -> efficient")
        assert decision.cost.estimated_savings == pytest.approx(0.9)
        assert len(sessions) == 0

    def test_reason_lists_signals(self, config, sessions, audit):
        """Test the reason names the top contributing dimensions."""
        analyzer, dispatcher = make(config, sessions, audit)
        decision = dispatcher.route(analyzer.analyze(MODERATE))
        assert decision.tier is Tier.BALANCED
        assert decision.target == "bal-1"
        assert decision.reason.startswith("Confidence 37.0%")
        assert "primary signals code, cognitive_load -> balanced" in decision.reason

    def test_escalation_reason(self, config, sessions, audit):
        """Test auto-escalation carries its override text as the reason."""
        analyzer, dispatcher = make(config, sessions, audit)
        decision = dispatcher.route(analyzer.analyze(PROOF))
        assert decision.tier is Tier.REASONING
        assert decision.target == "rea-1"
        assert decision.reason.startswith("Auto-escalation: 3 cognitive_load markers")
        assert decision.cost.estimated_savings == pytest.approx(-9.0)

    def test_escalation_ignores_profile(self, config, sessions, audit):
        """Test escalation still lands on reasoning under the eco profile."""
        analyzer, dispatcher = make(config, sessions, audit, RoutingProfile.ECO)
        assert dispatcher.route(analyzer.analyze(PROOF)).tier is Tier.REASONING


class TestProfiles:
    """Test profile-adjusted classification."""

    def test_eco_downgrades(self, config, sessions, audit):
        """Test ECO keeps a moderate prompt on the efficient tier."""
        analyzer, dispatcher = make(config, sessions, audit, RoutingProfile.ECO)
        analysis = analyzer.analyze(MODERATE)
        decision = dispatcher.route(analysis)
        assert analysis.tier is Tier.BALANCED
        assert decision.tier is Tier.EFFICIENT
        assert decision.profile is RoutingProfile.ECO

    def test_performance_upgrades(self, config, sessions, audit):
        """Test PERFORMANCE moves a borderline prompt up."""
        analyzer, dispatcher = make(config, sessions, audit, RoutingProfile.PERFORMANCE)
        assert dispatcher.route(analyzer.analyze(BORDERLINE)).tier is Tier.ADVANCED

    def test_balanced_borderline(self, config, sessions, audit):
        """Test the same prompt stays balanced under the default profile."""
        analyzer, dispatcher = make(config, sessions, audit)
        assert dispatcher.route(analyzer.analyze(BORDERLINE)).tier is Tier.BALANCED


class TestOverride:
    """Test explicit target overrides."""

    def test_override_bypasses_selection(self, config, sessions, audit):
        """Test the override target wins and nothing is pinned."""
        analyzer, dispatcher = make(config, sessions, audit)
        analysis = analyzer.analyze(PROOF)
        decision = dispatcher.route(analysis, session_id="s1", override_target="custom/model")
        assert decision.target == "custom/model"
        assert decision.fallbacks == ()
        assert decision.reason == "Target override: custom/model"
        assert decision.analysis is analysis
        assert decision.tier is Tier.REASONING
        assert decision.cost is None
        assert "s1" not in sessions

    def test_override_leaves_pin_alone(self, config, sessions, audit):
        """Test an override neither changes nor counts against the pin."""
        analyzer, dispatcher = make(config, sessions, audit)
        dispatcher.route(analyzer.analyze(SIMPLE), session_id="s1")
        dispatcher.route(analyzer.analyze(SIMPLE), session_id="s1", override_target="x")
        entry = sessions.get("s1")
        assert entry.decision.target == "eff-1"
        assert entry.message_count == 1


class TestSessionPinning:
    """Test sticky session behavior."""

    def test_injected_empty_store_is_used(self, config, audit, clock):
        """Test an empty session store passed in is the one the dispatcher fills."""
        sessions = SessionStore(capacity=10, ttl_seconds=60, clock=clock, audit=audit)
        analyzer, dispatcher = make(config, sessions, audit)
        assert dispatcher.sessions is sessions
        dispatcher.route(analyzer.analyze(SIMPLE), session_id="s1")
        assert "s1" in sessions
        assert sessions.get("s1").message_count == 1

    def test_first_message_pins(self, config, sessions, audit):
        """Test a new session is recorded at message one."""
        analyzer, dispatcher = make(config, sessions, audit)
        decision = dispatcher.route(analyzer.analyze(SIMPLE), session_id="s1")
        assert decision.pinned is False
        entry = sessions.get("s1")
        assert entry.decision.target == "eff-1"
        assert entry.message_count == 1

    def test_pinned_session_reuses_target(self, config, sessions, audit):
        """Test later messages stay on the pinned target."""
        analyzer, dispatcher = make(config, sessions, audit)
        first = dispatcher.route(analyzer.analyze(SIMPLE), session_id="s1")
        analysis = analyzer.analyze(MODERATE)
        decision = dispatcher.route(analysis, session_id="s1")
        assert decision.target == "eff-1"
        assert decision.tier is Tier.EFFICIENT
        assert decision.pinned is True
        assert decision.reason == "Session pinned: eff-1 (message 2)"
        assert decision.analysis is analysis
        # confidence, fallbacks and cost come from the pinned decision
        assert decision.confidence == first.confidence
        assert decision.confidence != pytest.approx(analysis.confidence)
        assert decision.fallbacks == ("eff-2",)
        assert decision.cost == first.cost
        assert decision.cost.estimated_savings == pytest.approx(0.9)
        assert sessions.get("s1").message_count == 2

    def test_escalation_breaks_pin(self, config, sessions, audit):
        """Test auto-escalation overrides an existing pin."""
        analyzer, dispatcher = make(config, sessions, audit)
        dispatcher.route(analyzer.analyze(SIMPLE), session_id="s1")
        decision = dispatcher.route(analyzer.analyze(PROOF), session_id="s1")
        assert decision.target == "rea-1"
        assert decision.pinned is False
        entry = sessions.get("s1")
        assert entry.decision.target == "rea-1"
        assert entry.message_count == 2

    def test_pinning_disabled(self, config, sessions, audit):
        """Test sessions are ignored when pinning is off."""
        config = config.model_copy(update={"session_pinning": False})
        analyzer, dispatcher = make(config, sessions, audit)
        dispatcher.route(analyzer.analyze(SIMPLE), session_id="s1")
        decision = dispatcher.route(analyzer.analyze(MODERATE), session_id="s1")
        assert decision.target == "bal-1"
        assert decision.pinned is False
        assert len(sessions) == 0

    def test_periodic_reevaluation(self, config, sessions, audit):
        """Test every fifth message runs full classification when allowed."""
        analyzer, dispatcher = make(config, sessions, audit)
        dispatcher.route(analyzer.analyze(SIMPLE), session_id="s1", allow_reevaluation=True)
        for n in range(2, 5):
            decision = dispatcher.route(
                analyzer.analyze(MODERATE), session_id="s1", allow_reevaluation=True
            )
            assert decision.target == "eff-1", f"message {n}"
            assert decision.pinned is True

        decision = dispatcher.route(analyzer.analyze(MODERATE), session_id="s1", allow_reevaluation=True)
        assert decision.target == "bal-1"
        assert decision.pinned is False
        entry = sessions.get("s1")
        assert entry.decision.target == "bal-1"
        assert entry.message_count == 5

    def test_reevaluation_same_target_reports_pinned(self, config, sessions, audit):
        """Test a re-evaluation landing on the pinned target reports pinned."""
        analyzer, dispatcher = make(config, sessions, audit)
        for _ in range(4):
            dispatcher.route(analyzer.analyze(SIMPLE), session_id="s1", allow_reevaluation=True)
        decision = dispatcher.route(analyzer.analyze(SIMPLE), session_id="s1", allow_reevaluation=True)
        assert decision.pinned is True
        assert not decision.reason.startswith("Session pinned")

    def test_no_reevaluation_without_flag(self, config, sessions, audit):
        """Test the plain dispatcher path never re-evaluates."""
        analyzer, dispatcher = make(config, sessions, audit)
        dispatcher.route(analyzer.analyze(SIMPLE), session_id="s1")
        for _ in range(6):
            decision = dispatcher.route(analyzer.analyze(MODERATE), session_id="s1")
        assert decision.target == "eff-1"

    def test_reevaluation_due(self, config, sessions, audit):
        """Test the re-evaluation cadence."""
        _, dispatcher = make(config, sessions, audit)
        assert [n for n in range(1, 11) if dispatcher.reevaluation_due(n)] == [5, 10]

    def test_reevaluation_disabled(self, config_data, sessions, audit):
        """Test reevaluate_every=0 turns periodic re-evaluation off."""
        config_data["session"]["reevaluateEvery"] = 0
        _, dispatcher = make(RouterConfig.model_validate(config_data), sessions, audit)
        assert not any(dispatcher.reevaluation_due(n) for n in range(1, 20))


class TestFallback:
    """Test the fallback walk."""

    def test_primary_first(self, config, sessions, audit):
        """Test the primary is returned when nothing failed."""
        _, dispatcher = make(config, sessions, audit)
        assert dispatcher.get_fallback(Tier.ADVANCED, set()) == "adv-1"

    def test_next_in_chain(self, config, sessions, audit):
        """Test failed targets are skipped."""
        _, dispatcher = make(config, sessions, audit)
        assert dispatcher.get_fallback(Tier.ADVANCED, {"adv-1"}) == "adv-2"

    def test_downgrades_tier(self, config, sessions, audit):
        """Test an exhausted tier falls to the next cheaper one."""
        _, dispatcher = make(config, sessions, audit)
        assert dispatcher.get_fallback(Tier.ADVANCED, {"adv-1", "adv-2"}) == "bal-1"
        assert dispatcher.get_fallback(Tier.REASONING, {"rea-1", "rea-2", "adv-1", "adv-2", "bal-1"}) == "bal-2"

    def test_never_upgrades(self, config, sessions, audit):
        """Test the walk never moves to a more capable tier."""
        _, dispatcher = make(config, sessions, audit)
        assert dispatcher.get_fallback(Tier.EFFICIENT, {"eff-1", "eff-2"}) is None

    def test_all_exhausted(self, config, sessions, audit):
        """Test exhaustion returns None instead of raising."""
        _, dispatcher = make(config, sessions, audit)
        everything = {f"{p}-{i}" for p in ("eff", "bal", "adv", "rea") for i in (1, 2)}
        assert dispatcher.get_fallback(Tier.REASONING, everything) is None
