# git_list_files/services/__init__.py
from __future__ import annotations

"""
Service layer: git delegation (services.git) and diagnostics
(services.diagnostics).
"""
