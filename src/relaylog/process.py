"""
Process and thread identification for log records.
"""

from __future__ import annotations

import os
import threading
from typing import Optional, Tuple


def get_process_info() -> Tuple[Optional[int], Optional[int]]:
    """Return ``(process_id, thread_id)`` for the calling thread."""
    return os.getpid(), threading.get_native_id()
