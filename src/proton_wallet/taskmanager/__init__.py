"""Task manager: asyncio cron scheduling for the child processes.

Provides ``TaskManager`` for periodic jobs such as:
- The 100 ms view poll in the UI process
- The fiat price refresh
"""

from __future__ import annotations

from proton_wallet.taskmanager.manager import CronJob, TaskManager

__all__ = ["CronJob", "TaskManager"]
