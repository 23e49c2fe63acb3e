"""Live position sources: Termux GPS plus trace recording and playback."""

import json
import subprocess
import time
from datetime import datetime
from typing import Optional

from .models import Location


class GPS:
    """GPS access via Termux API"""

    def __init__(self, provider: str = "network"):
        self.provider = provider
        self.last_location: Optional[Location] = None
        self.consecutive_failures = 0

    def _fail(self) -> None:
        self.consecutive_failures += 1
        return None

    def get_location(self, timeout: int = 15) -> Optional[Location]:
        """Get current location using termux-location"""
        try:
            result = subprocess.run(
                ["termux-location", "-p", self.provider, "-r", "once"],
                capture_output=True,
                text=True,
                timeout=timeout
            )
        except (subprocess.TimeoutExpired, FileNotFoundError):
            return self._fail()

        if result.returncode != 0 or not result.stdout.strip():
            return self._fail()

        try:
            data = json.loads(result.stdout)
            location = Location(
                lat=float(data["latitude"]),
                lon=float(data["longitude"]),
                accuracy=data.get("accuracy"),
                timestamp=time.time()
            )
        except (json.JSONDecodeError, KeyError, TypeError, ValueError):
            return self._fail()

        self.last_location = location
        self.consecutive_failures = 0
        return location

    def get_status(self) -> str:
        if self.consecutive_failures == 0:
            acc = ""
            if self.last_location and self.last_location.accuracy:
                acc = f", accuracy {self.last_location.accuracy:.0f}m"
            return f"GPS OK{acc}"
        return f"GPS: {self.consecutive_failures} consecutive failures"


class GPSRecorder:
    """Wraps a GPS and records every sample, failed ones included"""

    def __init__(self, gps: GPS, record_path: str):
        self.gps = gps
        self.record_path = record_path
        self.trace: list[dict] = []
        self.start_time = time.time()

    @property
    def last_location(self) -> Optional[Location]:
        return self.gps.last_location

    def get_location(self, timeout: int = 15) -> Optional[Location]:
        location = self.gps.get_location(timeout)
        self.trace.append({
            "elapsed": time.time() - self.start_time,
            "location": location.to_dict() if location else None,
        })
        return location

    def get_status(self) -> str:
        return self.gps.get_status()

    def save(self):
        """Save trace to file"""
        with open(self.record_path, "w", encoding="utf-8") as f:
            json.dump({
                "recorded_at": datetime.now().isoformat(),
                "trace": self.trace
            }, f, indent=2)
        print(f"GPS trace saved to {self.record_path} ({len(self.trace)} samples)")


class GPSPlayback:
    """Replays a recorded trace, one sample per call"""

    def __init__(self, playback_path: str):
        self.playback_path = playback_path
        self.index = 0
        self.last_location: Optional[Location] = None
        self.consecutive_failures = 0

        with open(playback_path, encoding="utf-8") as f:
            self.trace: list[dict] = json.load(f)["trace"]
        print(f"Loaded GPS trace from {playback_path} ({len(self.trace)} samples)")

    def get_location(self, timeout: int = 15) -> Optional[Location]:
        if self.is_finished():
            return None

        entry = self.trace[self.index]
        self.index += 1

        if not entry.get("location"):
            self.consecutive_failures += 1
            return None
        self.last_location = Location.from_dict(entry["location"])
        self.consecutive_failures = 0
        return self.last_location

    def is_finished(self) -> bool:
        return self.index >= len(self.trace)

    def get_status(self) -> str:
        progress = f"{self.index}/{len(self.trace)}"
        if self.consecutive_failures == 0:
            return f"Playback OK ({progress})"
        return f"Playback: {self.consecutive_failures} failures ({progress})"
