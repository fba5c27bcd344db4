import networkx as nx

from config import PhysicsConfig
from graph_engine import GraphEngine
from conftest import make_engine


def test_load_drops_self_loops_and_duplicate_edges():
    graph = nx.MultiGraph()
    graph.add_nodes_from(["a", "b", "c"])
    graph.add_edges_from([("a", "b"), ("b", "a"), ("a", "a"), ("b", "c")])

    engine = GraphEngine()
    engine.load_from_networkx(graph, seed=3)

    assert len(engine.edges) == 2
    assert engine.neighbors_of("a") == {"b"}
    assert engine.neighbors_of("b") == {"a", "c"}


def test_labels_come_from_artist_names():
    graph = nx.Graph()
    graph.add_node("7", name="Nina Simone")
    graph.add_node("8")

    engine = GraphEngine()
    engine.load_from_networkx(graph)

    assert engine.nodes["7"].label == "Nina Simone"
    assert engine.nodes["8"].label == "8"


def test_unknown_node_has_no_neighbours_or_position():
    engine = make_engine({"a": (1.0, 2.0)}, [])
    assert engine.neighbors_of("zz") == set()
    assert engine.position_of("zz") is None
    assert not engine.set_position("zz", 0.0, 0.0)
    assert not engine.has_node("zz")


def test_set_position_roundtrip():
    engine = make_engine({"a": (1.0, 2.0)}, [])
    assert engine.set_position("a", -5.5, 3.25)
    assert engine.position_of("a") == (-5.5, 3.25)


def test_radius_grows_with_degree_and_caps():
    assert GraphEngine.radius_for_degree(0) == 20
    assert GraphEngine.radius_for_degree(4) == 30
    assert GraphEngine.radius_for_degree(40) == 50


def test_remove_node_drops_edges_and_adjacency():
    engine = make_engine({"a": (0.0, 0.0), "b": (1.0, 0.0), "c": (2.0, 0.0)},
                         [("a", "b"), ("b", "c")])
    assert engine.remove_node("b")

    assert not engine.has_node("b")
    assert engine.edges == []
    assert engine.neighbors_of("a") == set()
    assert engine.nodes["a"].radius == 20
    assert not engine.remove_node("b")


def test_stats_count_unique_connections():
    engine = make_engine({"a": (0.0, 0.0), "b": (1.0, 0.0), "c": (2.0, 0.0)},
                         [("a", "b"), ("b", "a"), ("b", "c")])
    assert engine.stats() == {"artists": 3, "connections": 2}


def test_step_never_moves_pinned_nodes():
    engine = make_engine({"a": (0.0, 0.0), "b": (30.0, 0.0), "c": (0.0, 30.0)},
                         [("a", "b"), ("a", "c")])
    engine.step(pinned={"a", "b"})

    assert engine.position_of("a") == (0.0, 0.0)
    assert engine.position_of("b") == (30.0, 0.0)
    assert engine.position_of("c") != (0.0, 30.0)


def test_step_handles_coincident_nodes():
    engine = make_engine({"a": (5.0, 5.0), "b": (5.0, 5.0)}, [("a", "b")])
    engine.step()
    for uid in ("a", "b"):
        x, y = engine.position_of(uid)
        assert x == x and y == y  # not NaN


def test_layout_stops_after_iteration_budget():
    engine = make_engine({"a": (0.0, 0.0), "b": (400.0, 0.0)}, [("a", "b")])
    engine.apply_config(PhysicsConfig(layout_max_iterations=3))
    engine.start_layout()

    steps = 0
    while engine.layout_active:
        engine.step()
        steps += 1
    assert steps <= 3


def test_layout_converges_early_when_at_rest():
    engine = make_engine({"a": (0.0, 0.0)}, [])
    engine.start_layout()
    engine.step()
    assert not engine.layout_active


def test_apply_config_sets_layout_constants():
    engine = GraphEngine(PhysicsConfig(layout_edge_length=60.0, layout_repulsion=800.0, layout_spring_k=0.2,
                                       layout_damping=0.5, layout_center_attraction=0.0))
    assert engine.spring_length == 60.0
    assert engine.repulsion == 800.0
    assert engine.spring_k == 0.2
    assert engine.damping == 0.5
    assert engine.center_attraction == 0.0


def test_center_pull_follows_config():
    engine = make_engine({"a": (50.0, 0.0)}, [])
    engine.step()
    # (0 - 50 * 0.01) * 0.85
    assert abs(engine.position_of("a")[0] - 49.575) < 1e-9

    engine.set_position("a", 50.0, 0.0)
    engine.apply_config(PhysicsConfig(layout_center_attraction=0.0))
    engine.start_layout()
    engine.step()
    assert engine.position_of("a") == (50.0, 0.0)
