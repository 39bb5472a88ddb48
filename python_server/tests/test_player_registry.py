"""Tests for player creation and the economic tick."""

import random

import pytest

from planetserver.engine.player_registry import PlayerRegistry
from planetserver.loaders.game_config_loader import GameConfig


def _make_registry(seed: int = 1) -> PlayerRegistry:
    return PlayerRegistry(GameConfig(), random.Random(seed))


class TestCreate:
    def test_seed_values(self):
        reg = _make_registry()
        p = reg.create("Alice", now_ms=1234.0)
        assert p.lvl == 1
        assert p.res == 50
        assert p.fleet == 0
        assert p.military_lvl == 0 and p.fort_lvl == 0
        assert p.last_attack_ms is None
        assert p.last_seen_ms == 1234.0
        assert p.color.startswith("hsl(")

    def test_spawn_inside_margins(self):
        reg = _make_registry()
        for i in range(50):
            p = reg.create(f"p{i:03d}")
            assert 200 <= p.x <= 3800
            assert 200 <= p.y <= 2800

    def test_same_seed_same_map(self):
        a = _make_registry(5).create("Alice")
        b = _make_registry(5).create("Alice")
        assert (a.x, a.y, a.color) == (b.x, b.y, b.color)

    def test_lookup_and_remove(self):
        reg = _make_registry()
        reg.create("Alice")
        assert "Alice" in reg
        assert reg.get(None) is None
        assert reg.remove("Alice").nick == "Alice"
        assert reg.remove("Alice") is None
        assert len(reg) == 0


class TestEconomicTick:
    def test_income_per_level(self):
        reg = _make_registry()
        p = reg.create("Alice")
        p.lvl = 3
        reg.step_all()
        assert p.res == pytest.approx(50 + 24)

    def test_no_regen_without_fortification(self):
        reg = _make_registry()
        p = reg.create("Alice")
        reg.step_all()
        assert p.defense == 0.0

    def test_regen_scales_with_fort_level(self):
        reg = _make_registry()
        p = reg.create("Alice")
        p.fort_lvl = 2
        reg.step_all()
        assert p.defense == pytest.approx(1.0)

    def test_regen_capped(self):
        reg = _make_registry()
        p = reg.create("Alice")
        p.fort_lvl = 1  # cap 15
        p.defense = 14.8
        reg.step_all()
        assert p.defense == pytest.approx(15.0)
        reg.step_all()
        assert p.defense == pytest.approx(15.0)

    def test_defense_above_cap_left_alone(self):
        reg = _make_registry()
        p = reg.create("Alice")
        p.fort_lvl = 1
        p.defense = 20.0
        reg.step_all()
        assert p.defense == 20.0

    def test_offline_players_still_earn(self):
        reg = _make_registry()
        p = reg.create("Alice")
        p.online = False
        reg.step_all()
        assert p.res == pytest.approx(58)


class TestPublicState:
    def test_views_floor_defense_and_hide_internals(self):
        reg = _make_registry()
        p = reg.create("Alice")
        p.defense = 3.7
        (view,) = reg.public_state()
        assert view["defense"] == 3
        assert view["lastAttack"] == 0
        assert "lastSeen" not in view
        assert p.private_view()["defense"] == pytest.approx(3.7)
