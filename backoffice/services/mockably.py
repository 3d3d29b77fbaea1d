"""
Thin seam over process-global functions (clock, memory, loaded modules).

Request helpers never call time.time() or psutil directly; they go through
a Mockably instance so tests can substitute a fake with fixed readings.
"""
import sys
import time

import psutil


class Mockably:

    def __init__(self):
        self._process = psutil.Process()

    def microtime(self) -> float:
        """Current wall clock time in seconds as a float."""
        return time.time()

    def memory_usage_mb(self) -> float:
        """Resident set size of this process in megabytes."""
        return self._process.memory_info().rss / 1024 / 1024

    def loaded_module_count(self) -> int:
        return len(sys.modules)
