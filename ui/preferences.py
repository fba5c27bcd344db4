from dataclasses import fields

from PyQt6.QtWidgets import (QDialog, QVBoxLayout, QHBoxLayout, QFormLayout, QDoubleSpinBox,
                             QSpinBox, QPushButton, QMessageBox)
from PyQt6.QtCore import pyqtSignal

from config import PhysicsConfig, ConfigError

LABELS = {
    "follow_strength": "Follow strength",
    "spring_constant": "Spring constant",
    "repulsion_strength": "Repulsion strength",
    "ideal_distance": "Ideal distance",
    "drag_damping": "Damping while dragging",
    "decay_factor": "Decay after release",
    "settle_threshold": "Settle threshold",
    "frame_interval_ms": "Frame interval (ms)",
    "layout_max_iterations": "Layout iterations",
    "layout_edge_length": "Layout edge length",
    "layout_repulsion": "Layout repulsion",
    "layout_spring_k": "Layout spring stiffness",
    "layout_damping": "Layout damping",
    "layout_center_attraction": "Layout centre pull",
}


class PreferencesDialog(QDialog):
    settings_applied = pyqtSignal(object)  # PhysicsConfig

    def __init__(self, parent=None, config=None):
        super().__init__(parent)
        self.setWindowTitle("Physics Preferences")
        self.resize(340, 360)
        config = config or PhysicsConfig()

        self.layout = QVBoxLayout(self)
        form = QFormLayout()
        self.inputs = {}

        for f in fields(PhysicsConfig):
            value = getattr(config, f.name)
            if f.type is int:
                box = QSpinBox()
                box.setRange(0, 100000)
                box.setValue(value)
            else:
                box = QDoubleSpinBox()
                box.setDecimals(3)
                box.setSingleStep(0.01 if value < 1 else 1.0)
                box.setRange(0.0, 100000.0)
                box.setValue(value)
            self.inputs[f.name] = box
            form.addRow(LABELS.get(f.name, f.name), box)
        self.layout.addLayout(form)

        # Buttons
        btn_layout = QHBoxLayout()
        self.btn_defaults = QPushButton("Defaults")
        self.btn_defaults.clicked.connect(self.on_defaults)
        self.btn_save = QPushButton("Apply")
        self.btn_save.clicked.connect(self.on_save)
        self.btn_cancel = QPushButton("Cancel")
        self.btn_cancel.clicked.connect(self.close)

        btn_layout.addWidget(self.btn_defaults)
        btn_layout.addStretch()
        btn_layout.addWidget(self.btn_cancel)
        btn_layout.addWidget(self.btn_save)
        self.layout.addLayout(btn_layout)

        self.setStyleSheet("""
            QDialog { background-color: #2d2d2d; color: white; }
            QLabel { color: white; }
            QSpinBox, QDoubleSpinBox { background-color: #3e3e3e; color: white; padding: 3px; border: 1px solid #555; }
            QPushButton { background-color: #0d47a1; color: white; padding: 5px 15px; border: none; }
            QPushButton:hover { background-color: #1565c0; }
        """)

    def on_defaults(self):
        defaults = PhysicsConfig()
        for name, box in self.inputs.items():
            box.setValue(getattr(defaults, name))

    def on_save(self):
        values = {name: box.value() for name, box in self.inputs.items()}
        try:
            config = PhysicsConfig.from_mapping(values)
        except ConfigError as e:
            QMessageBox.warning(self, "Invalid settings", str(e))
            return
        self.settings_applied.emit(config)
        self.accept()
