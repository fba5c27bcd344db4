import logging
import math
import random

from config import PhysicsConfig

logger = logging.getLogger(__name__)


class Node:
    def __init__(self, uid, label, data=None, x=0.0, y=0.0):
        self.uid = uid
        self.label = label
        self.data = data or {}
        self.x = x
        self.y = y
        # Layout velocity only. Drag physics keeps its own state.
        self.vx = 0.0
        self.vy = 0.0
        self.radius = 20


class GraphEngine:
    """
    Holds the artist graph: node positions (the position store), undirected
    adjacency (the topology provider) and a small force-directed layout used
    to place nodes after a load.
    """

    def __init__(self, config=None):
        self.nodes = {}  # uid -> Node
        self.edges = []  # (uid1, uid2), one per unordered pair
        self.adjacency = {}  # uid -> set of uids

        self.layout_iterations_left = 0
        self.apply_config(config or PhysicsConfig())

    def apply_config(self, config):
        self.config = config
        self.repulsion = config.layout_repulsion
        self.spring_k = config.layout_spring_k
        self.spring_length = config.layout_edge_length
        self.damping = config.layout_damping
        self.center_attraction = config.layout_center_attraction

    def load_from_networkx(self, nx_graph, seed=None):
        rng = random.Random(seed)
        self.nodes = {}
        self.edges = []
        self.adjacency = {}

        # Spread initial positions so the layout doesn't start from a pile-up
        spread = 100.0 * max(1.0, math.sqrt(nx_graph.number_of_nodes()))

        for n, data in nx_graph.nodes(data=True):
            label = data.get("name", str(n))
            self.nodes[n] = Node(n, label, dict(data),
                                 rng.uniform(-spread, spread), rng.uniform(-spread, spread))
            self.adjacency[n] = set()

        seen = set()
        for u, v in nx_graph.edges():
            if u == v or u not in self.nodes or v not in self.nodes:
                continue
            key = frozenset((u, v))
            if key in seen:
                continue
            seen.add(key)
            self.edges.append((u, v))
            self.adjacency[u].add(v)
            self.adjacency[v].add(u)

        for uid, node in self.nodes.items():
            node.radius = self.radius_for_degree(len(self.adjacency[uid]))

        logger.info(f"Loaded graph with {len(self.nodes)} nodes and {len(self.edges)} edges")

    @staticmethod
    def radius_for_degree(degree):
        return min(20 + 2.5 * degree, 50)

    # --- Topology provider ---

    def neighbors_of(self, uid):
        return set(self.adjacency.get(uid, ())) - {uid}

    def has_node(self, uid):
        return uid in self.nodes

    # --- Position store ---

    def position_of(self, uid):
        node = self.nodes.get(uid)
        if node is None:
            return None
        return (node.x, node.y)

    def set_position(self, uid, x, y):
        node = self.nodes.get(uid)
        if node is None:
            return False
        node.x = x
        node.y = y
        return True

    def remove_node(self, uid):
        if uid not in self.nodes:
            return False
        del self.nodes[uid]
        for other in self.adjacency.pop(uid, ()):
            self.adjacency[other].discard(uid)
            self.nodes[other].radius = self.radius_for_degree(len(self.adjacency[other]))
        self.edges = [(u, v) for u, v in self.edges if uid not in (u, v)]
        logger.info(f"Removed node {uid}")
        return True

    def stats(self):
        return {"artists": len(self.nodes), "connections": len(self.edges)}

    # --- Layout ---

    @property
    def layout_active(self):
        return self.layout_iterations_left > 0

    def start_layout(self):
        self.layout_iterations_left = self.config.layout_max_iterations
        for node in self.nodes.values():
            node.vx = 0.0
            node.vy = 0.0

    def stop_layout(self):
        self.layout_iterations_left = 0

    def _add_repulsion(self, forces, node_items):
        # All pairs, each pair once
        for i, n1 in enumerate(node_items):
            for n2 in node_items[i + 1:]:
                dx = n1.x - n2.x
                dy = n1.y - n2.y
                dist = max(math.hypot(dx, dy), 1.0)  # coincident nodes push with unit distance

                f = self.repulsion / (dist * dist)
                fx = (dx / dist) * f
                fy = (dy / dist) * f

                forces[n1.uid][0] += fx
                forces[n1.uid][1] += fy
                forces[n2.uid][0] -= fx
                forces[n2.uid][1] -= fy

    def _add_springs(self, forces):
        for u, v in self.edges:
            n1 = self.nodes[u]
            n2 = self.nodes[v]

            dx = n2.x - n1.x
            dy = n2.y - n1.y
            dist = math.hypot(dx, dy)
            if dist == 0:
                continue

            f = self.spring_k * (dist - self.spring_length)
            fx = (dx / dist) * f
            fy = (dy / dist) * f

            forces[u][0] += fx
            forces[u][1] += fy
            forces[v][0] -= fx
            forces[v][1] -= fy

    def _add_center_pull(self, forces, node_items):
        for n in node_items:
            forces[n.uid][0] -= n.x * self.center_attraction
            forces[n.uid][1] -= n.y * self.center_attraction

    def step(self, pinned=()):
        """
        Runs one layout iteration. Nodes in `pinned` exert forces but are
        never moved. Returns the largest per-axis speed of the moved nodes.
        """
        pinned = set(pinned)
        forces = {uid: [0.0, 0.0] for uid in self.nodes}
        node_items = list(self.nodes.values())

        self._add_repulsion(forces, node_items)
        self._add_springs(forces)
        self._add_center_pull(forces, node_items)

        max_speed = 0.0
        for n in node_items:
            if n.uid in pinned:
                n.vx = 0.0
                n.vy = 0.0
                continue
            fx, fy = forces[n.uid]

            n.vx = (n.vx + fx) * self.damping
            n.vy = (n.vy + fy) * self.damping

            n.x += n.vx
            n.y += n.vy
            max_speed = max(max_speed, abs(n.vx), abs(n.vy))

        if self.layout_iterations_left > 0:
            self.layout_iterations_left -= 1
            if max_speed <= self.config.settle_threshold:
                logger.debug("Layout converged")
                self.layout_iterations_left = 0

        return max_speed
