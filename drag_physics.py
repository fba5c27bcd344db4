import logging
import math
from enum import Enum

from config import PhysicsConfig

logger = logging.getLogger(__name__)


class Phase(Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    DECELERATING = "decelerating"


# --- Force integrator ---

def follow_force(delta, follow_strength):
    return (delta[0] * follow_strength, delta[1] * follow_strength)


def spring_force(position, dragged_position, original_distance, spring_constant):
    """
    Pulls a node back towards its original separation from the dragged node.
    Zero when both nodes share a position.
    """
    dx = position[0] - dragged_position[0]
    dy = position[1] - dragged_position[1]
    dist = math.sqrt(dx*dx + dy*dy)
    if dist == 0:
        return (0.0, 0.0)

    f = -(dist - original_distance) * spring_constant
    return ((dx / dist) * f, (dy / dist) * f)


def repulsion_force(position, other_position, ideal_distance, repulsion_strength):
    """Inverse-square push away from another connected node closer than ideal_distance."""
    dx = position[0] - other_position[0]
    dy = position[1] - other_position[1]
    dist = math.sqrt(dx*dx + dy*dy)
    if dist == 0 or dist >= ideal_distance:
        return (0.0, 0.0)

    f = repulsion_strength / (dist * dist)
    return ((dx / dist) * f, (dy / dist) * f)


def integrate_connected_node(position, velocity, original_distance, dragged_position, delta,
                             other_positions, config):
    """
    Advances one connected node by one drag step.

    Returns (new_velocity, new_position). `other_positions` are the positions
    of the remaining connected nodes, used for pairwise repulsion.
    """
    vx, vy = velocity

    fx, fy = follow_force(delta, config.follow_strength)
    vx += fx
    vy += fy

    fx, fy = spring_force(position, dragged_position, original_distance, config.spring_constant)
    vx += fx
    vy += fy

    for other in other_positions:
        fx, fy = repulsion_force(position, other, config.ideal_distance, config.repulsion_strength)
        vx += fx
        vy += fy

    vx *= config.drag_damping
    vy *= config.drag_damping

    return (vx, vy), (position[0] + vx, position[1] + vy)


def decay_velocity(velocity, decay_factor, settle_threshold):
    """Returns (new_velocity, still_moving) for one deceleration frame."""
    vx = velocity[0] * decay_factor
    vy = velocity[1] * decay_factor
    moving = abs(vx) > settle_threshold or abs(vy) > settle_threshold
    return (vx, vy), moving


def settle_frame_count(v0, decay_factor=0.88, settle_threshold=0.1):
    """
    Number of frames after release until a node released with speed `v0`
    settles. The release step itself decays once, so a node at or below the
    threshold after that step settles with zero frames.

    Equal to floor(log(threshold / v0) / log(decay)) for v0 > threshold,
    and 0 otherwise.
    """
    if not 0 < decay_factor < 1:
        raise ValueError("decay_factor must be between 0 and 1")
    frames = 0
    v = abs(v0)
    while True:
        v *= decay_factor
        if v <= settle_threshold:
            return frames
        frames += 1


# --- Session state ---

class NodeState:
    """Transient physics state of one connected node."""

    def __init__(self, original_distance, original_angle):
        self.vx = 0.0
        self.vy = 0.0
        self.original_distance = original_distance
        self.original_angle = original_angle
        self.settled = False

    @property
    def velocity(self):
        return (self.vx, self.vy)


class DragSession:
    def __init__(self, generation, dragged_id, pointer, states, config):
        self.generation = generation
        self.dragged_id = dragged_id
        self.previous_pointer = pointer
        self.connected_ids = frozenset(states)
        # Stable iteration order for reproducible float sums
        self.order = tuple(sorted(self.connected_ids, key=str))
        self.states = states  # uid -> NodeState
        self.skipped = set()
        self.config = config
        self.phase = Phase.DRAGGING
        self.frame_handle = None
        self.decay_frames = 0

    def live_ids(self):
        return [uid for uid in self.order if uid not in self.skipped]


class DragController:
    """
    Drives the drag physics state machine: Idle -> Dragging -> Decelerating -> Idle.

    `topology` must provide neighbors_of(uid); `store` must provide
    position_of(uid) (None when the node is gone) and set_position(uid, x, y);
    `scheduler` must provide schedule_frame(callback) and cancel_frame(handle).
    """

    def __init__(self, topology, store, scheduler, config=None, on_state_changed=None):
        self.topology = topology
        self.store = store
        self.scheduler = scheduler
        self.config = config or PhysicsConfig()
        self.on_state_changed = on_state_changed
        self._session = None
        self._generation = 0

    @property
    def session(self):
        return self._session

    @property
    def phase(self):
        if self._session is None:
            return Phase.IDLE
        return self._session.phase

    def apply_config(self, config):
        """New settings take effect from the next grab."""
        self.config = config.validate()

    def owned_nodes(self):
        """Nodes whose positions the active session is writing."""
        s = self._session
        if s is None:
            return frozenset()
        owned = set(s.live_ids())
        if s.phase == Phase.DRAGGING:
            owned.add(s.dragged_id)
        return frozenset(owned)

    def _set_phase(self, phase):
        logger.debug(f"Drag phase -> {phase.value}")
        if self.on_state_changed:
            self.on_state_changed(phase)

    # --- Input events ---

    def on_grab(self, node_id):
        self.cancel()

        pos = self.store.position_of(node_id)
        if pos is None:
            logger.warning(f"Grab ignored, node {node_id} no longer exists")
            return None

        states = {}
        for uid in self.topology.neighbors_of(node_id):
            if uid == node_id:
                continue
            other = self.store.position_of(uid)
            if other is None:
                logger.info(f"Neighbour {uid} of {node_id} has no position, skipping")
                continue
            dx = other[0] - pos[0]
            dy = other[1] - pos[1]
            states[uid] = NodeState(math.sqrt(dx*dx + dy*dy), math.atan2(dy, dx))

        self._generation += 1
        self._session = DragSession(self._generation, node_id, pos, states, self.config)
        logger.debug(f"Grabbed {node_id} with {len(states)} connected nodes")
        self._set_phase(Phase.DRAGGING)
        return self._session

    def on_move(self, node_id, position=None):
        """
        Applies one drag step. If `position` is given it becomes the dragged
        node's new position before forces are computed. Returns True if the
        step ran.
        """
        s = self._session
        if s is None or s.phase != Phase.DRAGGING or node_id != s.dragged_id:
            return False

        if position is not None:
            self.store.set_position(node_id, position[0], position[1])

        current = self.store.position_of(node_id)
        if current is None:
            logger.warning(f"Dragged node {node_id} disappeared, aborting session")
            self._teardown()
            return False

        delta = (current[0] - s.previous_pointer[0], current[1] - s.previous_pointer[1])
        cfg = s.config

        # Simultaneous update: every node reads positions from the same snapshot
        snapshot = {}
        for uid in s.live_ids():
            p = self.store.position_of(uid)
            if p is None:
                logger.info(f"Connected node {uid} disappeared, skipping it")
                s.skipped.add(uid)
                continue
            snapshot[uid] = p

        updates = {}
        for uid, p in snapshot.items():
            st = s.states[uid]
            others = [q for other_uid, q in snapshot.items() if other_uid != uid]
            updates[uid] = integrate_connected_node(
                p, st.velocity, st.original_distance, current, delta, others, cfg)

        for uid, (velocity, new_pos) in updates.items():
            st = s.states[uid]
            st.vx, st.vy = velocity
            self.store.set_position(uid, new_pos[0], new_pos[1])

        s.previous_pointer = current
        return True

    def on_release(self, node_id):
        s = self._session
        if s is None or s.phase != Phase.DRAGGING or node_id != s.dragged_id:
            return

        if not s.live_ids():
            self._teardown()
            return

        s.phase = Phase.DECELERATING
        self._set_phase(Phase.DECELERATING)
        # First deceleration step runs with the release itself
        self._decay_frame(s.generation)

    def cancel(self):
        """Drops the current session immediately, including any pending frame."""
        s = self._session
        if s is None:
            return
        if s.frame_handle is not None:
            self.scheduler.cancel_frame(s.frame_handle)
            s.frame_handle = None
        logger.debug(f"Cancelled session for {s.dragged_id} ({s.phase.value})")
        self._teardown()

    # --- Deceleration ---

    def _schedule_decay(self, s):
        generation = s.generation
        s.frame_handle = self.scheduler.schedule_frame(lambda: self._decay_frame(generation))

    def _decay_frame(self, generation):
        s = self._session
        if s is None or s.generation != generation or s.phase != Phase.DECELERATING:
            logger.debug(f"Stale decay frame for generation {generation} ignored")
            return

        s.frame_handle = None
        s.decay_frames += 1
        cfg = s.config
        still_moving = False

        for uid in s.live_ids():
            st = s.states[uid]
            if st.settled:
                continue
            p = self.store.position_of(uid)
            if p is None:
                logger.info(f"Connected node {uid} disappeared, skipping it")
                s.skipped.add(uid)
                continue

            (st.vx, st.vy), moving = decay_velocity(st.velocity, cfg.decay_factor, cfg.settle_threshold)
            if moving:
                still_moving = True
                self.store.set_position(uid, p[0] + st.vx, p[1] + st.vy)
            else:
                st.settled = True

        if still_moving:
            self._schedule_decay(s)
        else:
            logger.debug(f"Session for {s.dragged_id} settled after {s.decay_frames} frames")
            self._teardown()

    def _teardown(self):
        s = self._session
        if s is None:
            return
        s.states.clear()
        s.skipped.clear()
        self._session = None
        self._set_phase(Phase.IDLE)
