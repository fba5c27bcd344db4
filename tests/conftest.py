import os

import networkx as nx
import pytest

from config import PhysicsConfig
from drag_physics import DragController
from frame_scheduler import ManualFrameScheduler
from graph_engine import GraphEngine


def make_engine(positions, edges):
    """Engine with fixed positions: {uid: (x, y)} and [(u, v), ...]."""
    graph = nx.Graph()
    for uid in positions:
        graph.add_node(uid, name=uid)
    graph.add_edges_from(edges)

    engine = GraphEngine()
    engine.load_from_networkx(graph, seed=1)
    for uid, (x, y) in positions.items():
        engine.set_position(uid, x, y)
    return engine


@pytest.fixture
def scheduler():
    return ManualFrameScheduler()


@pytest.fixture
def star(scheduler):
    """A at the origin connected to B (100, 0) and C (0, 100). D is isolated."""
    engine = make_engine(
        {"A": (0.0, 0.0), "B": (100.0, 0.0), "C": (0.0, 100.0), "D": (500.0, 500.0)},
        [("A", "B"), ("A", "C")],
    )
    controller = DragController(engine, engine, scheduler, PhysicsConfig())
    return engine, controller


@pytest.fixture(scope="session")
def qt_app():
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    from PyQt6.QtWidgets import QApplication
    return QApplication.instance() or QApplication([])
