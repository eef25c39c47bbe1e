from reefmatch.components.run_state import RunState
from reefmatch.events.bus import (EVENT_MATCH_FOUND, EVENT_MATCH_CLEARED, EVENT_GRAVITY_APPLIED,
                                  EVENT_REFILL_COMPLETED, EVENT_CASCADE_STEP, EVENT_CASCADE_COMPLETE,
                                  EVENT_SCORE_CHANGED)
from reefmatch.systems.board_ops import GravityMove, find_all_matches, tile_type_grid
from reefmatch.systems.match_resolution import MatchResolutionSystem, batch_points
from tests.helpers import build_board, layout_with, unique_layout


def _run_state(world) -> RunState:
    return next(comp for _, comp in world.get_component(RunState))


def test_batch_points_caps_combo_multiplier():
    assert batch_points(3, 1) == 30
    assert batch_points(6, 1) == 60
    assert batch_points(4, 5) == 200
    assert batch_points(4, 9) == 200


def test_horizontal_match_clears_drops_and_refills():
    layout = layout_with(5, 5, {(2, 0): 'ranged', (2, 1): 'ranged', (2, 2): 'ranged'})
    bus, world, _, source = build_board(5, 5, layout)
    resolver = MatchResolutionSystem(world, bus, source)

    found, cleared, gravity, refill, complete = {}, {}, {}, {}, {}
    bus.subscribe(EVENT_MATCH_FOUND, lambda s, **k: found.update(k))
    bus.subscribe(EVENT_MATCH_CLEARED, lambda s, **k: cleared.update(k))
    bus.subscribe(EVENT_GRAVITY_APPLIED, lambda s, **k: gravity.update(k))
    bus.subscribe(EVENT_REFILL_COMPLETED, lambda s, **k: refill.update(k))
    bus.subscribe(EVENT_CASCADE_COMPLETE, lambda s, **k: complete.update(k))

    batches = resolver.resolve()

    assert batches == [3]
    assert found['positions'] == [(2, 0), (2, 1), (2, 2)]
    assert found['combo'] == 1
    assert cleared['types'] == [(2, 0, 'ranged'), (2, 1, 'ranged'), (2, 2, 'ranged')]
    assert GravityMove(source=(1, 0), target=(2, 0), type_name='x1_0') in gravity['moves']
    assert GravityMove(source=(0, 2), target=(1, 2), type_name='x0_2') in gravity['moves']
    assert len(gravity['moves']) == 6
    assert sorted(spawn.position for spawn in refill['spawns']) == [(0, 0), (0, 1), (0, 2)]
    assert complete == {'depth': 1, 'batches': [3]}
    assert _run_state(world).score == 30
    assert not find_all_matches(world)
    assert all(cell is not None for row in tile_type_grid(world) for cell in row)


def test_two_step_cascade_scores_with_rising_combo():
    layout = layout_with(5, 5, {(0, 0): 'hex', (0, 1): 'hex', (0, 2): 'hex'})
    bus, world, _, source = build_board(5, 5, layout)
    resolver = MatchResolutionSystem(world, bus, source)
    # The first refill lines up a second triple along the top row.
    source.push('blood', 'blood', 'blood')

    steps, scores = [], []
    bus.subscribe(EVENT_CASCADE_STEP, lambda s, **k: steps.append((k['depth'], k['points'])))
    bus.subscribe(EVENT_SCORE_CHANGED, lambda s, **k: scores.append((k['score'], k['delta'], k['combo'])))

    assert resolver.resolve() == [3, 3]
    assert steps == [(1, 30), (2, 60)]
    assert scores == [(30, 30, 1), (90, 60, 2)]
    state = _run_state(world)
    assert state.score == 90
    assert state.combo == 2
    assert state.cascade_depth == 2


def test_combo_law_over_long_chain():
    layout = layout_with(4, 4, {(0, 0): 'a', (0, 1): 'a', (0, 2): 'a'})
    bus, world, _, source = build_board(4, 4, layout)
    resolver = MatchResolutionSystem(world, bus, source)
    for color in ('b', 'c', 'd', 'e', 'f', 'g'):
        source.push(color, color, color)

    batches = resolver.resolve()

    assert batches == [3] * 7
    expected = sum(size * 10 * min(i, 5) for i, size in enumerate(batches, start=1))
    assert expected == 750
    assert _run_state(world).score == expected


def test_stable_board_completes_without_scoring():
    bus, world, _, source = build_board(4, 4, unique_layout(4, 4))
    resolver = MatchResolutionSystem(world, bus, source)
    complete = {}
    bus.subscribe(EVENT_CASCADE_COMPLETE, lambda s, **k: complete.update(k))
    assert resolver.resolve() == []
    assert complete == {'depth': 0, 'batches': []}
    assert _run_state(world).score == 0
