"""Campus schedule package.

This package is organized by feature modules (users, subjects, attendance)
with a thin Flask JSON controller layer over service/repository layers.
"""
from __future__ import annotations

from .main import create_app
