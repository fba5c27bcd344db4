from PyQt6.QtWidgets import QWidget
from PyQt6.QtCore import QTimer, Qt, QPointF, QRectF, pyqtSignal
from PyQt6.QtGui import QPainter, QColor, QPen, QBrush, QFont, QTransform

import math

from drag_physics import Phase


class GraphWidget(QWidget):
    nodeClicked = pyqtSignal(str)

    def __init__(self, engine, controller, parent=None):
        super().__init__(parent)
        self.engine = engine
        self.controller = controller

        # Rendering settings
        self.explored_color = QColor("#1db954")
        self.unexplored_color = QColor("#e67e22")
        self.node_text_color = QColor("#ffffff")
        self.edge_color = QColor("#555555")
        self.highlight_color = QColor("#1db954")
        self.bg_color = QColor("#121212")

        # Camera
        self.offset_x = 0
        self.offset_y = 0
        self.scale = 1.0
        self.min_scale = 0.1
        self.max_scale = 5.0

        # Interaction
        self.dragging_uid = None
        self.hover_uid = None
        self.panning = False
        self.last_mouse_pos = QPointF()

        # Layout + repaint timer
        self.timer = QTimer(self)
        self.timer.timeout.connect(self.frame_loop)
        self.timer.start(self.controller.config.frame_interval_ms)

        self.setMouseTracking(True)

    def set_frame_interval(self, interval_ms):
        self.timer.setInterval(interval_ms)

    def frame_loop(self):
        if self.engine.layout_active:
            self.engine.step(pinned=self.controller.owned_nodes())
        self.update()

    def border_color(self, rating):
        if rating >= 8:
            return QColor("#ffd700")
        if rating >= 6:
            return QColor("#1db954")
        return QColor("#666666")

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        painter.fillRect(self.rect(), self.bg_color)

        transform = QTransform()
        center_x = self.width() / 2
        center_y = self.height() / 2

        transform.translate(center_x + self.offset_x, center_y + self.offset_y)
        transform.scale(self.scale, self.scale)
        painter.setTransform(transform)

        # Draw Edges
        normal_pen = QPen(self.edge_color, 2)
        highlight_pen = QPen(self.highlight_color, 3)
        for u, v in self.engine.edges:
            n1 = self.engine.nodes.get(u)
            n2 = self.engine.nodes.get(v)
            if n1 and n2:
                highlighted = self.hover_uid in (u, v)
                painter.setPen(highlight_pen if highlighted else normal_pen)
                painter.setOpacity(1.0 if highlighted else 0.6)
                painter.drawLine(QPointF(n1.x, n1.y), QPointF(n2.x, n2.y))
        painter.setOpacity(1.0)

        # Draw Nodes
        font = QFont("Segoe UI", 9)
        font.setBold(True)
        painter.setFont(font)

        for node in self.engine.nodes.values():
            fill = self.explored_color if node.data.get("explored") else self.unexplored_color
            painter.setBrush(QBrush(fill))
            painter.setPen(QPen(self.border_color(node.data.get("rating", 5)), 3))

            r = node.radius * (1.1 if node.uid == self.hover_uid else 1.0)
            rect = QRectF(node.x - r, node.y - r, r * 2, r * 2)
            painter.drawEllipse(rect)

            painter.setPen(self.node_text_color)
            painter.drawText(QRectF(node.x - 50, node.y + r + 2, 100, 20),
                             Qt.AlignmentFlag.AlignCenter, node.label)

    def node_at(self, world_pos):
        for node in self.engine.nodes.values():
            dx = world_pos.x() - node.x
            dy = world_pos.y() - node.y
            if math.sqrt(dx*dx + dy*dy) <= node.radius:
                return node
        return None

    def mousePressEvent(self, event):
        mouse_pos = event.position()

        if event.button() == Qt.MouseButton.RightButton:
            self.panning = True
            self.last_mouse_pos = mouse_pos
            self.setCursor(Qt.CursorShape.ClosedHandCursor)
            return

        if event.button() == Qt.MouseButton.LeftButton:
            node = self.node_at(self.screen_to_world(mouse_pos))
            if node is not None:
                self.dragging_uid = node.uid
                self.controller.on_grab(node.uid)
                self.setCursor(Qt.CursorShape.PointingHandCursor)
                self.nodeClicked.emit(node.uid)

    def mouseMoveEvent(self, event):
        mouse_pos = event.position()

        if self.panning:
            delta = mouse_pos - self.last_mouse_pos
            self.offset_x += delta.x()
            self.offset_y += delta.y()
            self.last_mouse_pos = mouse_pos
            self.update()

        elif self.dragging_uid is not None:
            world_pos = self.screen_to_world(mouse_pos)
            if not self.controller.on_move(self.dragging_uid, (world_pos.x(), world_pos.y())):
                if self.controller.phase == Phase.IDLE:
                    # Session aborted, the node was removed under the cursor
                    self.dragging_uid = None
            self.update()

        else:
            node = self.node_at(self.screen_to_world(mouse_pos))
            uid = node.uid if node is not None else None
            if uid != self.hover_uid:
                self.hover_uid = uid
                self.update()

    def mouseReleaseEvent(self, event):
        if self.dragging_uid is not None:
            self.controller.on_release(self.dragging_uid)
        self.dragging_uid = None
        self.panning = False
        self.setCursor(Qt.CursorShape.ArrowCursor)

    def wheelEvent(self, event):
        angle = event.angleDelta().y()
        factor = 1.1 if angle > 0 else 0.9

        new_scale = self.scale * factor
        if self.min_scale <= new_scale <= self.max_scale:
            self.scale = new_scale
            self.update()

    def center_on_node(self, uid):
        node = self.engine.nodes.get(uid)
        if node is None:
            return
        self.offset_x = -node.x * self.scale
        self.offset_y = -node.y * self.scale
        self.update()

    def reset_view(self):
        self.offset_x = 0
        self.offset_y = 0
        self.scale = 1.0
        self.update()

    def screen_to_world(self, screen_pos):
        # world = (screen - center - offset) / scale
        center_x = self.width() / 2
        center_y = self.height() / 2

        wx = (screen_pos.x() - center_x - self.offset_x) / self.scale
        wy = (screen_pos.y() - center_y - self.offset_y) / self.scale
        return QPointF(wx, wy)
