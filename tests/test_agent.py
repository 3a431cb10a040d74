import pytest

from ccagent.agent import AgentConfig, PlanningAgent
from ccagent.grid import ChipWorld
from ccagent.planners import run_episode
from ccagent.types import Action, TileStatus

from conftest import parse


def tick(world, agent):
    action = agent.get_action()
    world.apply(action)
    return action


@pytest.mark.e2e
class TestScenarios:
    def test_chip_first_then_exit(self, open_world):
        stats = run_episode(open_world, max_ticks=50)

        assert stats.reached
        assert stats.chips_left == 0
        assert stats.moves == 6
        assert stats.path_taken.index((2, 2)) < stats.path_taken.index((2, 0))
        assert stats.path_taken[-1] == (2, 0)

    def test_key_before_blocked_chip(self, blue_door_world):
        actions = []
        stats = run_episode(blue_door_world, max_ticks=100,
                            on_tick=lambda t, a, w: actions.append(a))

        assert actions[0] is Action.MOVE_RIGHT
        assert stats.reached
        path = stats.path_taken
        assert path.index((1, 3)) < path.index((2, 4)) < path.index((1, 7))

    def test_stuck_triggers_door_detour(self):
        world = parse("""
            #######
            #@...E#
            #.....#
            #B....#
            #######
        """)
        world.holdings = ["KEY_BLUE"]
        agent = PlanningAgent(world)
        a, b = (1, 1), (1, 2)

        actions, stuck = [], []
        for pos in [a, b] * 3:
            world.pos = pos   # the map forces the robot back and forth
            actions.append(agent.get_action())
            stuck.append(agent.stuck)

        assert not any(stuck[:4])
        assert stuck[5]

        naive = PlanningAgent(world)
        world.pos = b
        assert naive.get_action() is Action.MOVE_RIGHT
        # heads for the blue door at (3, 1) instead of the exit
        assert actions[5] in (Action.MOVE_DOWN, Action.MOVE_LEFT)

    def test_adjacent_exit_one_move_then_noop(self, exit_next_door_world):
        world = exit_next_door_world
        agent = PlanningAgent(world)

        assert tick(world, agent) is Action.MOVE_RIGHT
        assert world.reached
        assert tick(world, agent) is Action.NOOP
        assert tick(world, agent) is Action.NOOP

    def test_two_rooms_map(self, envs_dir):
        world = ChipWorld.load(f"{envs_dir}/03_two_rooms.txt")
        stats = run_episode(world, max_ticks=400)
        assert stats.reached
        assert stats.chips_left == 0


@pytest.mark.e2e
class TestPartialObservation:
    def test_hidden_map_blue_door(self, blue_door_world):
        blue_door_world.reveal = False
        stats = run_episode(blue_door_world, max_ticks=200, config=AgentConfig(use_full_map=False))
        assert stats.reached

    def test_hidden_corridor_finds_exit_via_frontier(self):
        world = parse("@.c.E", reveal=False)
        stats = run_episode(world, max_ticks=20)
        assert stats.reached
        assert stats.moves == 4

    def test_collected_items_are_forgotten(self):
        world = parse("""
            @c..
        """, reveal=False)
        agent = PlanningAgent(world)
        tick(world, agent)
        assert world.pos == (0, 1)
        tick(world, agent)
        assert agent.kb.status((0, 1)) is TileStatus.BLANK


@pytest.mark.unit
class TestPlanBuffer:
    def corridor(self):
        return parse("""
            #######
            #@...c#
            #....E#
            #######
        """)

    def test_plan_is_buffered_and_replayed(self):
        world = self.corridor()
        agent = PlanningAgent(world)

        assert tick(world, agent) is Action.MOVE_RIGHT
        assert agent.replans == 1
        assert agent.plan == [Action.MOVE_RIGHT] * 3
        tick(world, agent)
        assert agent.replans == 1
        assert len(agent.plan) == 2

    def test_deviation_discards_plan(self):
        world = self.corridor()
        agent = PlanningAgent(world)
        tick(world, agent)

        world.pos = (2, 1)   # pushed off course
        action = agent.get_action()
        assert action in (Action.MOVE_UP, Action.MOVE_RIGHT)
        assert agent.replans == 2
        assert len(agent.plan) == 4

    def test_blocked_next_move_discards_plan(self):
        world = self.corridor()
        agent = PlanningAgent(world)
        tick(world, agent)

        world.grid[(1, 3)] = world.grid[(0, 0)]   # a wall appears
        action = agent.get_action()
        assert action is not Action.MOVE_RIGHT
        assert agent.replans == 2


class BrokenWorld(ChipWorld):
    def neighbor_tiles(self, agent):
        raise RuntimeError("sensor failure")


class BlindWorld(ChipWorld):
    def robot_position(self, agent):
        return None


@pytest.mark.unit
class TestFaultContainment:
    def test_internal_error_becomes_noop(self, open_world):
        world = BrokenWorld(open_world.rows, open_world.cols, dict(open_world.grid), open_world.start)
        agent = PlanningAgent(world)
        agent.plan = [Action.MOVE_DOWN]
        assert agent.get_action() is Action.NOOP
        assert agent.plan == []

    def test_unknown_position_is_noop(self, open_world):
        world = BlindWorld(open_world.rows, open_world.cols, dict(open_world.grid), open_world.start)
        assert PlanningAgent(world).get_action() is Action.NOOP

    def test_boxed_in_robot_stays_put(self):
        world = parse("""
            ###
            #@#
            ###
            .c.
        """)
        agent = PlanningAgent(world)
        assert agent.get_action() is Action.NOOP


def sensed(world, config=None):
    """Agent that has folded in its first observation but not decided yet."""
    agent = PlanningAgent(world, config)
    agent._sense(world.pos)
    return agent


def room():
    return parse("""
        #####
        #...#
        #.@.#
        #...#
        #####
    """)


@pytest.mark.unit
class TestMoveToward:
    def test_next_to_unreachable_target(self):
        world = parse("""
            ######
            #@..~#
            ######
        """)
        agent = sensed(world)
        assert agent._move_toward((1, 1), (1, 4)) is Action.MOVE_RIGHT
        assert agent.plan == [Action.MOVE_RIGHT]
        assert agent.replans == 1

    def walled_chip(self):
        return parse("""
            #######
            #.....#
            #.@.###
            #...#c#
            #######
        """)

    def test_greedy_step_when_nothing_reachable(self):
        agent = sensed(self.walled_chip())
        assert agent._move_toward((2, 2), (3, 5)) is Action.MOVE_DOWN
        assert agent.plan == []
        assert agent.replans == 0

    def test_greedy_step_skips_recent_cells(self):
        agent = sensed(self.walled_chip())
        for pos in [(1, 1), (1, 2), (3, 2), (2, 2)]:
            agent.detector.record(pos)
        assert agent._move_toward((2, 2), (3, 5)) is Action.MOVE_RIGHT

    def test_explores_when_greedy_has_no_move(self):
        world = parse("""
            #####
            #.@~#
            #####
        """)
        agent = sensed(world)
        for pos in [(1, 1), (1, 2), (1, 1), (1, 2)]:
            agent.detector.record(pos)
        agent.kb.visited.add((1, 1))

        assert agent._move_toward((1, 2), (1, 3)) is Action.MOVE_LEFT
        # the move comes from a plan to a known cell, not a greedy step
        assert agent.replans == 1

    def test_boxed_in_falls_through_to_noop(self):
        world = parse("""
            ###
            #@#
            ###
            .c.
        """)
        agent = sensed(world)
        assert agent._move_toward((1, 1), (3, 1)) is Action.NOOP


@pytest.mark.unit
class TestExplore:
    def visited_room(self, config=None):
        world = room()
        agent = sensed(world, config)
        agent.kb.tiles.update(world.grid)
        blanks = [s for s, st in world.grid.items() if st is TileStatus.BLANK]
        agent.kb.visited.update(blanks)
        for s in blanks:
            agent.visit_counts[s] = 3
        return agent

    def test_unvisited_neighbour_first(self):
        agent = sensed(room())
        assert agent._explore((2, 2)) is Action.MOVE_UP
        assert agent.replans == 0

    def test_least_visited_known_cell(self):
        agent = self.visited_room()
        agent.visit_counts[(1, 3)] = 1

        assert agent._explore((2, 2)) is Action.MOVE_UP
        assert agent.plan == [Action.MOVE_RIGHT]
        assert agent.replans == 1

    def test_neighbour_not_recently_visited(self):
        agent = self.visited_room(AgentConfig(explore_attempts=0))
        for pos in [(3, 3), (2, 1), (1, 2), (2, 2)]:
            agent.detector.record(pos)
        assert agent._explore((2, 2)) is Action.MOVE_DOWN

    def test_any_open_neighbour_last(self):
        agent = self.visited_room(AgentConfig(explore_attempts=0, recent_avoid=5))
        for pos in [(2, 2), (1, 2), (3, 2), (2, 1), (2, 3), (2, 2)]:
            agent.detector.record(pos)
        assert agent._explore((2, 2)) is Action.MOVE_UP


@pytest.mark.unit
class TestDoorDetour:
    @pytest.mark.parametrize("visits, expected", [
        ({(1, 1): 3, (1, 5): 1}, Action.MOVE_RIGHT),
        ({(1, 1): 1, (1, 5): 3}, Action.MOVE_LEFT),
    ])
    def test_least_visited_door(self, visits, expected):
        world = parse("""
            #######
            #B.@.B#
            #######
        """)
        world.holdings = ["KEY_BLUE"]
        agent = sensed(world)
        agent.kb.visited.update(visits)
        agent.visit_counts.update(visits)

        assert agent._open_doors((1, 3)) is expected
        assert len(agent.plan) == 1

    def test_no_matching_key(self):
        world = parse("""
            #######
            #B.@.B#
            #######
        """)
        assert sensed(world)._open_doors((1, 3)) is None

    def test_detour_while_chips_remain(self):
        # the chip sits behind a red door and there is no red key
        world = parse("""
            ##########
            #B..@..Rc#
            ##########
        """)
        world.holdings = ["KEY_BLUE"]
        agent = PlanningAgent(world)
        a, b = (1, 4), (1, 5)

        actions, stuck = [], []
        for pos in [a, b] * 3:
            world.pos = pos
            actions.append(agent.get_action())
            stuck.append(agent.stuck)

        assert not any(stuck[:4])
        assert stuck[4] and stuck[5]
        # unstuck at b the agent explores to the right
        assert actions[1] is Action.MOVE_RIGHT
        # stuck at b it heads for the blue door at (1, 1)
        assert actions[5] is Action.MOVE_LEFT
        assert agent.plan == [Action.MOVE_LEFT] * 3


class TilesOnlyWorld(ChipWorld):
    tiles_calls = 0

    def tiles(self):
        self.tiles_calls += 1
        return super().tiles()

    def goal_position(self):
        return None

    def environment_positions(self):
        return None


@pytest.mark.unit
class TestFullMapFlag:
    def world(self):
        w = parse("@..E")
        return TilesOnlyWorld(w.rows, w.cols, dict(w.grid), w.start)

    def test_goal_from_full_map(self):
        world = self.world()
        assert PlanningAgent(world).locate_goal() == (0, 3)
        assert world.tiles_calls == 1

    def test_flag_off_never_reads_full_map(self):
        world = self.world()
        agent = PlanningAgent(world, AgentConfig(use_full_map=False))
        assert agent.locate_goal() is None

        assert tick(world, agent) is Action.MOVE_RIGHT
        assert world.tiles_calls == 0
