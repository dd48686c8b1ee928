from app.models.db.enums import UserRole
from app.services.attribution import attribute_agent, normalize_referral_code


def test_normalize_referral_code():
    assert normalize_referral_code("  agent42 ") == "AGENT42"
    assert normalize_referral_code("   ") is None
    assert normalize_referral_code(None) is None


def test_agent_clicking_credits_themselves(db_session, user_factory):
    agent = user_factory(UserRole.AGENT, referral_code="SELF01")
    user_factory(UserRole.AGENT, referral_code="OTHER1")
    result = attribute_agent(db_session, agent, "other1")
    assert result.agent_id == agent.id
    assert result.source == "self"


def test_referral_code_is_case_insensitive(db_session, user_factory):
    agent = user_factory(UserRole.AGENT, referral_code="AGENT42")
    result = attribute_agent(db_session, None, " agent42 ")
    assert result.agent_id == agent.id
    assert result.source == "referral_code"


def test_referral_code_beats_stored_referrer(db_session, user_factory):
    referrer = user_factory(UserRole.AGENT, referral_code="FIRST1")
    code_owner = user_factory(UserRole.AGENT, referral_code="SECOND")
    shopper = user_factory(referred_by=referrer)
    assert attribute_agent(db_session, shopper, "second").agent_id == code_owner.id
    stored = attribute_agent(db_session, shopper, None)
    assert stored.agent_id == referrer.id
    assert stored.source == "stored_referrer"


def test_inactive_or_unknown_codes_are_ignored(db_session, user_factory):
    user_factory(UserRole.AGENT, referral_code="GONE01", is_active=False)
    assert attribute_agent(db_session, None, "GONE01") is None
    assert attribute_agent(db_session, None, "NOPE99") is None
    shopper = user_factory()
    assert attribute_agent(db_session, shopper, None) is None
