"""Tests for the counter audit command."""

from freestealer.models import Tier
from freestealer.models.vote import VOTE_UP
from freestealer.scripts import check_counters


def _url(engine) -> str:
    return engine.url.render_as_string(hide_password=False)


def test_clean_database_exits_zero(engine, counter_service, test_user, test_tier, capsys) -> None:
    counter_service.apply_vote(test_user.id, test_tier.id, VOTE_UP)

    assert check_counters.main(["--url", _url(engine)]) == 0
    assert "all counters consistent" in capsys.readouterr().out


def test_drift_exits_one(engine, db_session, test_tier, capsys) -> None:
    tier = db_session.get(Tier, test_tier.id)
    tier.downvote_count = 3
    db_session.commit()

    assert check_counters.main(["--url", _url(engine)]) == 1
    out = capsys.readouterr().out
    assert f"tier {test_tier.id}:" in out
    assert "downvotes 3 (live 0)" in out
