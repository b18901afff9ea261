from __future__ import annotations

import qdarkstyle
from PySide6.QtWidgets import QApplication

from printdesk.styles.tokens import Colors, Radius, Space


def light_qss() -> str:
    c = Colors
    r = Radius
    s = Space
    return f"""
    QWidget {{ font-size: 13px; background: {c.bg}; color: {c.text}; }}
    QLabel#SectionTitle {{ font-size: 14px; font-weight: 700; color: {c.subtext}; padding: 2px 2px 0 2px; }}
    QLineEdit, QTextEdit, QPlainTextEdit, QSpinBox, QDoubleSpinBox, QComboBox {{
        border: 1px solid {c.input_border}; border-radius: {r.sm}px; padding: {s.xs}px; background: {c.card};
    }}
    QLineEdit:focus, QTextEdit:focus, QSpinBox:focus, QDoubleSpinBox:focus {{ border: 1px solid {c.primary}; }}
    QPushButton {{ padding: 6px 14px; border-radius: {r.md}px; border: 1px solid {c.border}; background: {c.card}; }}
    QPushButton:hover {{ background: #f3f6ff; border-color: #b8c6ff; }}
    QPushButton:pressed {{ background: #e8eeff; }}
    QTableWidget {{ gridline-color: {c.border}; background: {c.card}; }}
    QScrollArea#PageView, QScrollArea#PageView > QWidget > QWidget {{ background: {c.canvas}; }}
    """


def dark_qss() -> str:
    c = Colors
    r = Radius
    s = Space
    return f"""
    QWidget {{ font-size: 13px; background: {c.bg_dark}; color: {c.text_dark}; }}
    QLabel#SectionTitle {{ font-size: 14px; font-weight: 700; color: {c.text_dark}; padding: 2px 2px 0 2px; }}
    QLineEdit, QTextEdit, QPlainTextEdit, QSpinBox, QDoubleSpinBox, QComboBox {{
        border: 1px solid {c.input_border_dark}; border-radius: {r.sm}px; padding: {s.xs}px; background: #2e2e2e; color:{c.text_dark};
    }}
    QLineEdit:focus, QTextEdit:focus, QSpinBox:focus, QDoubleSpinBox:focus {{ border: 1px solid {c.primary_dark}; }}
    QPushButton {{ padding: 6px 14px; border-radius: {r.md}px; border: 1px solid {c.input_border_dark}; background: #3a3a3a; color: {c.text_dark}; }}
    QPushButton:hover {{ background: #414141; border-color: #6a6a6a; }}
    QPushButton:pressed {{ background: #3c3c3c; }}
    QTableWidget {{ gridline-color: {c.border_dark}; background: {c.card_dark}; }}
    QScrollArea#PageView, QScrollArea#PageView > QWidget > QWidget {{ background: {c.canvas_dark}; }}
    """


def apply_theme(app: QApplication, dark: bool) -> None:
    """qdarkstyle at app level in dark mode, with our QSS layered on top."""
    if dark:
        app.setStyleSheet(qdarkstyle.load_stylesheet(qt_api="pyside6") + dark_qss())
    else:
        app.setStyleSheet(light_qss())
