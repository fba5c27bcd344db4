import html
import logging
import os
import sys

from PyQt6.QtWidgets import (QApplication, QMainWindow, QFileDialog, QMessageBox, QVBoxLayout,
                             QWidget, QLabel, QSplitter, QTextBrowser)
from PyQt6.QtGui import QAction, QPalette, QColor
from PyQt6.QtCore import Qt

from config import PhysicsConfig, ConfigError
from drag_physics import DragController, Phase
from frame_scheduler import QtFrameScheduler
from graph_engine import GraphEngine
from graph_loader import load_graph_file, GraphLoadError
from ui.graph_widget import GraphWidget
from ui.preferences import PreferencesDialog

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("ArtistGraph - Artist Relationship Explorer")
        self.resize(1200, 800)

        # Setup Logic
        self.config = PhysicsConfig()
        self.engine = GraphEngine(self.config)
        self.scheduler = QtFrameScheduler(self.config.frame_interval_ms, self)
        self.controller = DragController(self.engine, self.engine, self.scheduler, self.config,
                                         on_state_changed=self.on_drag_phase_changed)
        self.selected_uid = None

        self.init_ui()
        self.setup_theme()

    def init_ui(self):
        self.central_widget = QWidget()
        self.setCentralWidget(self.central_widget)

        self.main_layout = QVBoxLayout(self.central_widget)
        self.main_layout.setContentsMargins(0, 0, 0, 0)

        self.info_label = QLabel("Open a graph file (File > Open Graph).")
        self.info_label.setStyleSheet("padding: 5px; background-color: #252526; color: #ccc; border-bottom: 1px solid #3e3e3e;")
        self.main_layout.addWidget(self.info_label)

        self.splitter = QSplitter(Qt.Orientation.Horizontal)
        self.main_layout.addWidget(self.splitter)

        # Left: artist details
        self.details_panel = QTextBrowser()
        self.details_panel.setOpenLinks(False)
        self.details_panel.anchorClicked.connect(self.on_connection_clicked)
        self.details_panel.setText("Select an artist to view details.")
        self.splitter.addWidget(self.details_panel)

        # Right: graph
        self.graph_widget = GraphWidget(self.engine, self.controller)
        self.graph_widget.nodeClicked.connect(self.show_node_info)
        self.splitter.addWidget(self.graph_widget)

        self.splitter.setStretchFactor(0, 25)
        self.splitter.setStretchFactor(1, 75)

        self.create_menu()

    def create_menu(self):
        menu = self.menuBar()
        menu.clear()

        file_menu = menu.addMenu("&File")

        open_action = QAction("&Open Graph...", self)
        open_action.setShortcut("Ctrl+O")
        open_action.triggered.connect(self.open_file_dialog)
        file_menu.addAction(open_action)

        exit_action = QAction("E&xit", self)
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

        edit_menu = menu.addMenu("&Edit")
        delete_action = QAction("&Remove Selected Artist", self)
        delete_action.setShortcut("Del")
        delete_action.triggered.connect(self.remove_selected)
        edit_menu.addAction(delete_action)

        pref_action = QAction("&Physics Preferences...", self)
        pref_action.triggered.connect(self.open_preferences)
        edit_menu.addAction(pref_action)

        view_menu = menu.addMenu("&View")
        reset_action = QAction("&Reset View", self)
        reset_action.triggered.connect(self.graph_widget.reset_view)
        view_menu.addAction(reset_action)

        relayout_action = QAction("Re-run &Layout", self)
        relayout_action.triggered.connect(self.engine.start_layout)
        view_menu.addAction(relayout_action)

    def setup_theme(self):
        app = QApplication.instance()
        app.setStyle("Fusion")

        palette = QPalette()
        palette.setColor(QPalette.ColorRole.Window, QColor(53, 53, 53))
        palette.setColor(QPalette.ColorRole.WindowText, Qt.GlobalColor.white)
        palette.setColor(QPalette.ColorRole.Base, QColor(25, 25, 25))
        palette.setColor(QPalette.ColorRole.AlternateBase, QColor(53, 53, 53))
        palette.setColor(QPalette.ColorRole.Text, Qt.GlobalColor.white)
        palette.setColor(QPalette.ColorRole.Button, QColor(53, 53, 53))
        palette.setColor(QPalette.ColorRole.ButtonText, Qt.GlobalColor.white)
        palette.setColor(QPalette.ColorRole.Link, QColor(29, 185, 84))
        palette.setColor(QPalette.ColorRole.Highlight, QColor(42, 130, 218))
        palette.setColor(QPalette.ColorRole.HighlightedText, Qt.GlobalColor.black)
        app.setPalette(palette)

        self.details_panel.setStyleSheet(
            "QTextBrowser { background-color: #1e1e1e; color: #d4d4d4; font-size: 13px; border: none; padding: 10px; }")

    def open_preferences(self):
        dlg = PreferencesDialog(self, self.config)
        dlg.settings_applied.connect(self.apply_config)
        dlg.exec()

    def apply_config(self, config):
        self.config = config
        self.engine.apply_config(config)
        self.controller.apply_config(config)
        self.scheduler.interval_ms = config.frame_interval_ms
        self.graph_widget.set_frame_interval(config.frame_interval_ms)
        logger.info(f"Applied physics settings: {config.to_dict()}")

    def on_drag_phase_changed(self, phase):
        s = self.controller.session
        if phase == Phase.DRAGGING and s is not None:
            node = self.engine.nodes.get(s.dragged_id)
            label = node.label if node is not None else s.dragged_id
            self.statusBar().showMessage(f"Dragging {label} ({len(s.connected_ids)} connected)")
        elif phase == Phase.DECELERATING:
            self.statusBar().showMessage("Settling...")
        else:
            self.statusBar().clearMessage()
        self.graph_widget.update()

    def show_node_info(self, uid):
        node = self.engine.nodes.get(uid)
        if node is None:
            return
        self.selected_uid = uid
        data = node.data

        text = f"<h1>{html.escape(node.label)}</h1>"
        text += f"<p>Location: {html.escape(data.get('location') or 'Unknown')}</p>"
        text += f"<p>Rating: {data.get('rating', 0)}</p>"
        text += f"<p>{'Explored ✓' if data.get('explored') else 'Not explored yet'}</p>"

        connected = sorted(self.engine.neighbors_of(uid), key=lambda n: self.engine.nodes[n].label.lower())
        if connected:
            text += f"<h3>Connected to ({len(connected)}):</h3><ul>"
            for other in connected:
                other_node = self.engine.nodes[other]
                mark = " ✓" if other_node.data.get("explored") else ""
                text += f'<li><a href="{html.escape(other)}">{html.escape(other_node.label)}</a>{mark}</li>'
            text += "</ul>"
        else:
            text += "<p><i>No connections</i></p>"

        genres = data.get("genres") or []
        if genres:
            text += f"<h3>Genres:</h3><p>{html.escape(', '.join(genres))}</p>"
        else:
            text += "<p><i>No genres</i></p>"

        self.details_panel.setHtml(text)

    def remove_selected(self):
        # Any session touching this node degrades on its next step
        if self.selected_uid is None or not self.engine.remove_node(self.selected_uid):
            return
        self.selected_uid = None
        stats = self.engine.stats()
        self.info_label.setText(f"{stats['artists']} artists, {stats['connections']} connections")
        self.details_panel.setText("Select an artist to view details.")
        self.graph_widget.update()

    def on_connection_clicked(self, url):
        uid = url.toString()
        if uid in self.engine.nodes:
            self.graph_widget.center_on_node(uid)
            self.show_node_info(uid)

    def open_file_dialog(self):
        fname, _ = QFileDialog.getOpenFileName(self, "Open Graph", "", "Graph files (*.json);;All Files (*)")
        if fname:
            self.load_graph(fname)

    def load_graph(self, path):
        self.info_label.setText(f"Loading {os.path.basename(path)}...")
        QApplication.processEvents()

        try:
            graph, physics = load_graph_file(path)
            if physics is not None:
                self.apply_config(PhysicsConfig.from_mapping(physics))
        except (OSError, GraphLoadError, ConfigError) as e:
            logger.error(f"Failed to load {path}: {e}")
            QMessageBox.critical(self, "Error", f"Failed to load graph:\n{e}")
            self.info_label.setText("Error loading graph.")
            return

        # Drop any running drag session before the nodes it references go away
        self.controller.cancel()
        self.engine.load_from_networkx(graph)
        self.engine.start_layout()
        self.selected_uid = None

        stats = self.engine.stats()
        self.info_label.setText(
            f"{os.path.basename(path)}: {stats['artists']} artists, {stats['connections']} connections")
        self.details_panel.setText("Select an artist to view details.")
        self.graph_widget.reset_view()


def main():
    app = QApplication(sys.argv)
    window = MainWindow()
    window.show()
    if len(sys.argv) > 1:
        window.load_graph(sys.argv[1])
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
