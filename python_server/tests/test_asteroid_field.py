"""Tests for the asteroid field and its respawn cycle."""

import random

from planetserver.engine.asteroid_field import AsteroidField
from planetserver.engine.world import World
from planetserver.loaders.game_config_loader import GameConfig


def _make_field(seed: int = 3) -> AsteroidField:
    field = AsteroidField(GameConfig(), random.Random(seed))
    field.populate()
    return field


class TestPopulate:
    def test_initial_field(self):
        field = _make_field()
        assert len(field) == 12
        assert field.alive_count() == 12
        ids = [a.id for a in field.all_asteroids]
        assert len(set(ids)) == 12
        for a in field.all_asteroids:
            assert 50 <= a.res <= 200
            assert 100 <= a.x <= 3900
            assert 100 <= a.y <= 2900


class TestHarvest:
    def test_harvest_once(self):
        field = _make_field()
        rock = field.all_asteroids[0]
        assert field.harvest(rock.id) == rock.res
        assert rock.alive is False
        assert field.harvest(rock.id) == 0

    def test_unknown_id(self):
        assert _make_field().harvest("nope") == 0

    def test_dead_asteroids_hidden_from_view(self):
        field = _make_field()
        dead = field.all_asteroids[3]
        field.harvest(dead.id)
        view_ids = [v["id"] for v in field.public_view()]
        assert dead.id not in view_ids
        assert len(view_ids) == 11
        assert dead not in field.alive()
        assert field.get(dead.id) is dead
        assert field.get_alive(dead.id) is None


class TestMaintain:
    def test_full_field_spawns_nothing(self):
        assert _make_field().maintain() == []

    def test_respawn_limited_per_cycle(self):
        field = _make_field()
        for a in field.all_asteroids[:5]:
            field.harvest(a.id)

        spawned = field.maintain()

        assert len(spawned) == 2
        assert field.alive_count() == 9
        assert len(field) == 12
        # first dead slots are reused
        assert field.all_asteroids[0] is spawned[0]
        assert field.all_asteroids[1] is spawned[1]
        assert {a.id for a in spawned} == {"ast-13", "ast-14"}

    def test_appends_when_no_dead_slot(self):
        field = _make_field()
        del field.all_asteroids[10:]

        spawned = field.maintain()

        assert len(field) == 12
        assert field.all_asteroids[10:] == spawned

    def test_converges_to_target(self):
        field = _make_field()
        for a in list(field.all_asteroids):
            field.harvest(a.id)
        for _ in range(6):
            field.maintain()
        assert field.alive_count() == 12
        assert field.maintain() == []


class TestRespawnSchedule:
    def test_respawn_runs_every_sixty_seconds(self):
        world = World(GameConfig(rng_seed=11))
        world.asteroids.populate()
        world.schedule()
        for a in world.asteroids.all_asteroids[:4]:
            world.asteroids.harvest(a.id)

        world.clock.advance(59_999)
        assert world.asteroids.alive_count() == 8

        world.clock.advance(1)
        assert world.asteroids.alive_count() == 10
