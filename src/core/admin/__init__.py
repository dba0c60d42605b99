# src/core/admin/__init__.py
"""
Администрирование платформы.
"""

from src.core.admin.service import AdminService, DriverFinanceRow, FinanceOverview

__all__ = [
    "AdminService",
    "DriverFinanceRow",
    "FinanceOverview",
]
