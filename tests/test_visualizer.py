"""
Relation Graph Visualizer Tests

End-to-end behaviour of the engine facade.
"""

import asyncio

import pytest

from relgraph import RelationGraphVisualizer
from relgraph.core.exceptions import InvalidFilterParameters
from relgraph.graph_visualization import FilterParameters, RelationRecord, SimulationState


@pytest.fixture
def viz(config, records):
    viz = RelationGraphVisualizer(config)
    assert viz.load_records(records) is True
    return viz


class TestLoading:

    def test_status_line(self, viz):
        assert viz.status_line() == "Showing 3 nodes / 2 links"

    def test_empty_input_means_no_data(self, config):
        viz = RelationGraphVisualizer(config)
        assert viz.load_records([]) is False
        assert viz.graph is None
        assert viz.visible_graph.node_count == 0
        assert viz.status()["has_data"] is False
        assert viz.solver.state == SimulationState.IDLE

    def test_options_follow_graph(self, viz):
        assert viz.options.labels == ("loss", "win")
        assert viz.options.max_weight == 2

    def test_reload_clamps_min_weight(self, viz):
        viz.update_filters(min_weight=2)
        viz.load_records([RelationRecord("A", "X", "win")])
        assert viz.filter_parameters.min_weight == 1

    def test_load_csv(self, config, tmp_path):
        path = tmp_path / "medals.csv"
        path.write_text("country,discipline,medal_type,name,event\n"
                        "USA,Swimming,Gold Medal,Alice,100m\n")
        viz = RelationGraphVisualizer(config)
        assert viz.load_csv(path) is True
        assert viz.status_line() == "Showing 2 nodes / 1 links"


class TestDerivation:

    def test_visible_graph_is_cached(self, viz):
        first = viz.visible_graph
        viz.tick(5)
        assert viz.visible_graph is first
        assert viz.solver.tick_count == 5

    def test_unchanged_filters_do_not_rebuild(self, viz):
        viz.visible_graph
        generation = viz.status()["filter_generation"]
        viz.update_filters(min_weight=1, hide_disconnected=True)
        assert viz.status()["filter_generation"] == generation

    def test_filter_change_rebuilds_layout(self, viz):
        viz.tick(5)
        viz.update_filters(min_weight=2)
        assert viz.status_line() == "Showing 2 nodes / 1 links"
        assert viz.solver.node_ids == ("A", "X")
        assert viz.solver.tick_count == 0

    def test_unknown_focus_is_reported(self, viz):
        viz.update_filters(node_focus="Z")
        status = viz.status()
        assert status["visible_edges"] == 0
        assert status["warnings"] == ["Filter parameter 'node_focus' references unknown node 'Z'"]

    def test_invalid_filter_value_rejected(self, viz):
        with pytest.raises(InvalidFilterParameters):
            viz.update_filters(min_weight=0)
        assert viz.filter_parameters.min_weight == 1

    def test_reset_filters(self, viz):
        viz.update_filters(label_filter="win", hide_disconnected=False)
        assert viz.reset_filters() == FilterParameters()


class TestInteraction:

    def test_drag_cycle(self, viz):
        viz.run_until_settled()
        assert viz.pointer_down(0.0, 0.0, node_id="A") == "A"
        assert viz.solver.is_pinned("A")
        assert viz.solver.state == SimulationState.RUNNING
        viz.pointer_move(120.0, 80.0)
        assert viz.snapshot().position_of("A") == (120.0, 80.0)
        viz.pointer_up()
        assert not viz.solver.is_pinned("A")

    def test_wheel_changes_view_only(self, viz):
        before = viz.snapshot()
        viz.wheel(-200.0, 400.0, 300.0)
        assert viz.controller.transform.scale > 1.0
        assert viz.snapshot() == before


class TestOutput:

    def test_status_contents(self, viz):
        status = viz.status()
        assert status["visible_nodes"] == 3
        assert status["total_edges"] == 2
        assert status["filters"]["hide_disconnected"] is True
        assert status["metrics"]["total_weight"] == 3

    def test_write_html(self, viz, tmp_path):
        viz.run_until_settled()
        path = viz.write_html(tmp_path / "graph.html")
        assert path.exists()


class TestScheduling:

    def test_filter_change_while_scheduled_restarts_ticking(self, viz):
        async def scenario():
            viz.start(interval=0)
            viz.update_filters(label_filter="win")
            assert viz.status_line() == "Showing 2 nodes / 1 links"
            assert viz.solver.is_scheduled
            await viz.solver.wait_settled()

        asyncio.run(scenario())
        assert viz.solver.state == SimulationState.SETTLED
        assert viz.solver.node_ids == ("A", "X")

    def test_close_stops_everything(self, viz):
        received = []
        viz.solver.on_tick(received.append)
        viz.tick(2)
        viz.close()
        assert viz.solver.state == SimulationState.IDLE
        assert viz.solver.tick() is False
        assert len(received) == 2

    def test_filter_change_after_loop_exit(self, viz):
        async def scenario():
            viz.start(interval=0)
            await viz.solver.wait_settled()

        asyncio.run(scenario())
        assert not viz.solver.is_scheduled

        viz.update_filters(min_weight=2)
        assert viz.snapshot().node_count == 2
        assert viz.status_line() == "Showing 2 nodes / 1 links"
        viz.tick(3)
        assert viz.snapshot().tick_count == 3

    def test_filter_change_outside_open_loop(self, viz):
        async def scenario():
            viz.start(interval=0)
            await viz.solver.wait_settled()

        loop = asyncio.new_event_loop()
        try:
            loop.run_until_complete(scenario())
            assert viz.solver.is_scheduled

            viz.update_filters(label_filter="loss")
            assert viz.status_line() == "Showing 2 nodes / 1 links"
            assert not viz.solver.is_scheduled
            assert viz.solver.state == SimulationState.RUNNING
            assert viz.visible_graph is viz.visible_graph
        finally:
            loop.close()
