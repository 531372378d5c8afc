"""Timed execution of a single optimizer run.

A watchdog thread samples the memory of this process while the run is in
progress and enforces a hard wall-clock limit. The optimizer itself knows
nothing about it: the watchdog is stopped through an Event once the run
returns, and on timeout it aborts the whole process.
"""
from __future__ import annotations

import os
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

import psutil

from . import config

TIMEOUT_EXIT_CODE = 3


@dataclass
class Measurement:
    elapsed_ns: int
    value: Any
    peak_rss_kb: int = 0
    samples: int = 0
    timed_out: bool = False


def _abort_process(time_limit: float) -> None:
    print(f"\n[fatal] Exceeded time limit set to {time_limit}s!", flush=True)
    os._exit(TIMEOUT_EXIT_CODE)


class Watchdog(threading.Thread):
    def __init__(self, stop: threading.Event, time_limit: float, interval: float,
                 mem_path: Optional[str] = None,
                 on_timeout: Callable[[float], None] = _abort_process):
        super().__init__(name="tsp-anneal-watchdog", daemon=True)
        self.stop = stop
        self.time_limit = time_limit
        self.interval = interval
        self.mem_path = mem_path
        self.on_timeout = on_timeout
        self.peak_rss_kb = 0
        self.samples = 0
        self.timed_out = False

    def run(self) -> None:
        proc = psutil.Process(os.getpid())
        start = time.monotonic()
        mem_file = open(self.mem_path, 'a') if self.mem_path else None
        try:
            while not self.stop.is_set():
                self._sample(proc, mem_file)
                if time.monotonic() - start >= self.time_limit:
                    self.timed_out = True
                    if mem_file is not None:
                        mem_file.flush()
                    self.on_timeout(self.time_limit)
                    return
                self.stop.wait(self.interval)
        finally:
            if mem_file is not None:
                mem_file.close()

    def _sample(self, proc: psutil.Process, mem_file) -> None:
        rss_kb = proc.memory_info().rss // 1024
        self.peak_rss_kb = max(self.peak_rss_kb, rss_kb)
        self.samples += 1
        if mem_file is not None:
            mem_file.write(f"{proc.memory_percent():.1f} {rss_kb} {proc.name()}\n")


def measure_execution_time(function: Callable[[], Any], mem_path: Optional[str] = None,
                           time_limit: float = config.TIME_LIMIT,
                           interval: float = config.MEM_SAMPLE_INTERVAL,
                           on_timeout: Callable[[float], None] = _abort_process) -> Measurement:
    """Call `function` under the watchdog and return its value with the elapsed wall time."""
    stop = threading.Event()
    watchdog = Watchdog(stop, time_limit, interval, mem_path=mem_path, on_timeout=on_timeout)
    watchdog.start()
    start = time.perf_counter_ns()
    try:
        value = function()
    finally:
        elapsed = time.perf_counter_ns() - start
        stop.set()
        watchdog.join()
    return Measurement(
        elapsed_ns=elapsed,
        value=value,
        peak_rss_kb=watchdog.peak_rss_kb,
        samples=watchdog.samples,
        timed_out=watchdog.timed_out,
    )
