"""Tests for mission movement, arrival detection and removal."""

import math

import pytest

from planetserver.engine.mission_engine import MissionEngine
from planetserver.loaders.game_config_loader import GameConfig
from planetserver.models.mission import MissionKind

DT = 0.05  # one 50 ms mission tick


def _engine(resolved=None, on_resolve=None) -> MissionEngine:
    """Engine whose resolver records arrivals (and optionally does more)."""
    resolved = resolved if resolved is not None else []

    def resolver(mission):
        resolved.append(mission.mission_id)
        if on_resolve is not None:
            on_resolve(mission)

    return MissionEngine(GameConfig(), resolver=resolver)


def _remaining(m) -> float:
    return math.hypot(m.tx - m.x, m.ty - m.y)


class TestMovement:
    def test_moves_one_step_towards_target(self):
        engine = _engine()
        m = engine.add_attack("a", "b", 10, 0, 0, 1000, 0, speed=100.0)
        engine.advance(DT)
        assert m.x == pytest.approx(5.0)
        assert m.y == pytest.approx(0.0)

    def test_diagonal_step_along_unit_vector(self):
        engine = _engine()
        m = engine.add_attack("a", "b", 10, 0, 0, 300, 400, speed=100.0)
        engine.advance(DT)
        assert m.x == pytest.approx(3.0)
        assert m.y == pytest.approx(4.0)

    def test_distance_monotonically_decreases_until_arrival(self):
        resolved = []
        engine = _engine(resolved)
        m = engine.add_mine("a", "ast-1", 0, 0, 137, -211)
        last = _remaining(m)
        for _ in range(200):
            engine.advance(DT)
            if resolved:
                break
            now = _remaining(m)
            assert now <= last
            last = now
        assert resolved == [m.mission_id]

    def test_target_is_never_reaimed(self):
        engine = _engine()
        m = engine.add_attack("a", "b", 10, 0, 0, 1000, 0, speed=120.0)
        engine.advance(DT)
        assert (m.tx, m.ty) == (1000, 0)

    def test_miner_and_return_use_miner_speed(self):
        engine = _engine()
        mine = engine.add_mine("a", "ast-1", 0, 0, 1000, 0)
        ret = engine.add_return("a", 0, 0, 1000, 0, cargo=5)
        assert mine.speed == ret.speed == GameConfig().miner_speed


class TestArrival:
    def test_arrives_within_step_plus_epsilon(self):
        resolved = []
        engine = _engine(resolved)
        # step = 100 * 0.05 = 5, epsilon = 5 → arrival under 10 units
        m = engine.add_attack("a", "b", 10, 0, 0, 9.9, 0, speed=100.0)
        views = engine.advance(DT)
        assert resolved == [m.mission_id]
        assert len(engine) == 0
        assert not m.active
        assert views is None

    def test_not_arrived_at_exact_threshold(self):
        resolved = []
        engine = _engine(resolved)
        m = engine.add_attack("a", "b", 10, 0, 0, 10.0, 0, speed=100.0)
        engine.advance(DT)
        assert resolved == []
        assert m.x == pytest.approx(5.0)

    def test_resolved_exactly_once(self):
        resolved = []
        engine = _engine(resolved)
        engine.add_attack("a", "b", 10, 0, 0, 1, 0, speed=100.0)
        for _ in range(5):
            engine.advance(DT)
        assert len(resolved) == 1

    def test_missions_resolve_in_insertion_order(self):
        resolved = []
        engine = _engine(resolved)
        first = engine.add_attack("a", "b", 1, 0, 0, 1, 0, speed=100.0)
        second = engine.add_mine("c", "ast-1", 0, 0, 1, 0)
        engine.advance(DT)
        assert resolved == [first.mission_id, second.mission_id]


class TestSnapshotPass:
    def test_inserted_missions_wait_for_next_tick(self):
        engine = None

        def spawn_return(mission):
            engine.add_return(mission.owner, mission.x, mission.y, 500, 0, cargo=7)

        engine = _engine(on_resolve=spawn_return)
        engine.add_mine("a", "ast-1", 0, 0, 1, 0)
        engine.advance(DT)

        (ret,) = engine.all_missions()
        assert ret.kind is MissionKind.RETURN
        assert (ret.x, ret.y) == (0, 0)

        engine.advance(DT)
        assert ret.x == pytest.approx(80.0 * DT)

    def test_missions_cancelled_mid_pass_are_skipped(self):
        resolved = []
        engine = None

        def wipe_target(mission):
            engine.cancel_owned_by(mission.target_nick)

        engine = _engine(resolved, on_resolve=wipe_target)
        attack = engine.add_attack("a", "b", 10, 0, 0, 1, 0, speed=100.0)
        victim = engine.add_attack("b", "c", 10, 0, 0, 1, 0, speed=100.0)
        engine.advance(DT)

        assert resolved == [attack.mission_id]
        assert victim.mission_id not in resolved
        assert len(engine) == 0


class TestViews:
    def test_views_are_lazy_and_single_use(self):
        engine = _engine()
        engine.add_attack("a", "b", 10, 0, 0, 1000, 0, speed=100.0)
        engine.add_return("c", 0, 0, 0, 1000, cargo=3)
        views = engine.advance(DT)
        assert views is not None
        first = list(views)
        assert [v["type"] for v in first] == ["attack", "return"]
        assert first[0]["targetNick"] == "b"
        assert first[1]["cargo"] == 3
        assert list(views) == []

    def test_no_views_when_nothing_flies(self):
        assert _engine().advance(DT) is None


class TestCancel:
    def test_cancel_owned_by_removes_only_owner(self):
        engine = _engine()
        engine.add_attack("a", "b", 10, 0, 0, 1000, 0, speed=100.0)
        engine.add_mine("a", "ast-1", 0, 0, 1000, 0)
        keep = engine.add_mine("b", "ast-2", 0, 0, 1000, 0)
        assert engine.cancel_owned_by("a") == 2
        assert engine.all_missions() == [keep]

    def test_cancel_unknown_owner(self):
        assert _engine().cancel_owned_by("ghost") == 0

    def test_mission_ids_unique(self):
        engine = _engine()
        ids = {engine.add_mine("a", "x", 0, 0, 1, 1).mission_id for _ in range(5)}
        assert len(ids) == 5
