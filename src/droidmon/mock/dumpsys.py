"""
Simulated `dumpsys battery` output.

Produces text shaped like the real service dump so we can develop and
test without a phone attached. The battery drains while unplugged,
charges while on AC, and warms up a little when charging.
"""

import math
import random
import threading

from droidmon.collector.source import TextSource

_TEMPLATE = """\
Current Battery Service state:
  AC powered: {ac}
  USB powered: false
  Wireless powered: false
  Max charging current: {max_current}
  Max charging voltage: 5000000
  Charge counter: {counter}
  status: {status}
  health: 2
  present: true
  level: {level}
  scale: 100
  voltage: {voltage}
  temperature: {temperature}
  technology: Li-ion
"""

# BatteryManager status codes
_STATUS_CHARGING = 2
_STATUS_DISCHARGING = 3
_STATUS_FULL = 5


class MockDumpsys(TextSource):

    def __init__(self, seed: int = 42, level: int = 64):
        self._rng = random.Random(seed)
        self._tick = 0
        self._level = float(level)
        self._plugged = False
        self._lock = threading.Lock()

    def read(self) -> str:
        """Generate one dump, advancing the simulation clock."""
        with self._lock:
            return self._next_dump()

    def _next_dump(self) -> str:
        self._tick += 1
        t = self._tick

        # Plug state flips now and then
        if self._rng.random() > 0.97 or self._level < 15:
            self._plugged = not self._plugged if self._level >= 15 else True

        if self._plugged:
            self._level = min(100.0, self._level + self._rng.uniform(0.2, 0.6))
        else:
            self._level = max(0.0, self._level - self._rng.uniform(0.0, 0.3))

        level = int(self._level)
        if self._plugged:
            status = _STATUS_FULL if level >= 100 else _STATUS_CHARGING
        else:
            status = _STATUS_DISCHARGING

        # Tenths of a degree: ~27C idle, a few degrees more when charging
        base_temp = 270 + (35 if self._plugged else 0) + 15 * math.sin(t * 0.05)
        temperature = int(base_temp + self._rng.gauss(0, 4))

        voltage = int(3600 + level * 6 + self._rng.gauss(0, 10))

        return _TEMPLATE.format(
            ac="true" if self._plugged else "false",
            max_current=2000000 if self._plugged else 0,
            counter=level * 40000,
            status=status,
            level=level,
            voltage=voltage,
            temperature=temperature,
        )

    def name(self) -> str:
        return "mock dumpsys"
