"""
scanradar.simulator
===================

Stand-alone data generator so the radar can be exercised without a rover.

The fake servo sweeps 0↔180° in 2° steps every 120 ms while a staged
scenario loops forever:

    vehicle-left   5 s   object at 40°
    clear-path     3 s
    vehicle-right  5 s   object at 140°
    clear-path     3 s

Readings within ±6° of the object report 40 cm (buzzer ON), everything else
reports full range.  Ctrl+C clears the scan topics and publishes an idle
status before exiting.
"""
from __future__ import annotations

import logging
import time
import uuid
from typing import List, NamedTuple, Optional, Tuple

import paho.mqtt.client as mqtt

from scanradar import config, wire
from scanradar.logging_config import setup_logging

log = logging.getLogger(__name__)


class Stage(NamedTuple):
    label: str
    object_angle: Optional[float]
    duration: float          # seconds


STAGES = (
    Stage("vehicle-left", 40, 5.0),
    Stage("clear-path", None, 3.0),
    Stage("vehicle-right", 140, 5.0),
    Stage("clear-path", None, 3.0),
)


class ScanSimulator:
    CLOSE_OBJECT_CM = 40
    OBJECT_HALF_WIDTH = 6
    SERVO_STEP = 2            # degrees per sample, like the firmware sweep
    SAMPLE_INTERVAL = 0.12    # seconds
    AMBIENT_TEMP = 26.5

    def __init__(self, max_distance: float, stages=STAGES, t0: float = 0.0):
        self.max_distance = max_distance
        self.stages = stages
        self.stage_idx = 0
        self.stage_started = t0
        self.servo_angle = 0
        self.servo_dir = 1

    @property
    def stage(self) -> Stage:
        return self.stages[self.stage_idx]

    def distance_at(self, angle: float) -> float:
        obj = self.stage.object_angle
        if obj is not None and abs(angle - obj) <= self.OBJECT_HALF_WIDTH:
            return self.CLOSE_OBJECT_CM
        return self.max_distance

    def step(self, now: float) -> Tuple[int, float, bool]:
        """
        Sample at the current servo angle, then advance servo and stage.

        Returns
        -------
        (angle, distance_cm, buzzer_on) for the sample just taken
        """
        angle = self.servo_angle
        distance = self.distance_at(angle)
        buzzer = distance <= self.CLOSE_OBJECT_CM

        self.servo_angle += self.servo_dir * self.SERVO_STEP
        if self.servo_angle >= 180:
            self.servo_angle, self.servo_dir = 180, -1
        elif self.servo_angle <= 0:
            self.servo_angle, self.servo_dir = 0, 1

        if now - self.stage_started >= self.stage.duration:
            self.stage_idx = (self.stage_idx + 1) % len(self.stages)
            self.stage_started = now
            log.info("Stage → %s", self.stage.label)

        return angle, distance, buzzer


class SimPublisher:
    """Publishes simulator samples with the same topics ScanMQTT subscribes to."""

    def __init__(self, host: str, port: int, prefix: str):
        self.prefix = prefix.strip("/")
        self.cli = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2,
                               client_id=f"scanradar-sim-{uuid.uuid4().hex[:8]}")
        self.cli.enable_logger(log)
        self.cli.connect(host, port, 60)
        self.cli.loop_start()
        self.touched: set = set()

    def publish(self, angle: int, distance: float, buzzer: bool, temperature: float) -> None:
        self.cli.publish(f"{self.prefix}/scan/{angle}",
                         wire.encode_scan_record(distance), retain=True)
        self.cli.publish(f"{self.prefix}/status",
                         wire.encode_status(angle, temperature, "SAFE", "ON" if buzzer else "OFF"),
                         retain=True)
        self.touched.add(angle)

    def clear(self, temperature: float) -> List:
        """Drop retained scan records and leave an idle status behind."""
        infos = [self.cli.publish(f"{self.prefix}/scan/{a}", b"", retain=True)
                 for a in sorted(self.touched)]
        infos.append(self.cli.publish(f"{self.prefix}/scan", b"", retain=True))
        infos.append(self.cli.publish(f"{self.prefix}/status",
                                      wire.encode_status(None, temperature), retain=True))
        self.touched.clear()
        return infos

    def close(self) -> None:
        self.cli.disconnect()
        self.cli.loop_stop()


def main():
    cfg = config.load()
    setup_logging(cfg["log_level"], cfg["log_file"])
    sim = ScanSimulator(float(cfg["max_distance_cm"]), t0=time.monotonic())
    pub = SimPublisher(cfg["broker"], int(cfg["port"]), cfg["topic_prefix"])

    log.info("Radar simulation running on %s:%s/%s", cfg["broker"], cfg["port"], cfg["topic_prefix"])
    log.info(" - 5s obstacle on left, 3s clear, 5s obstacle on right, 3s clear (loops).")
    log.info("Stage → %s", sim.stage.label)
    try:
        while True:
            angle, distance, buzzer = sim.step(time.monotonic())
            pub.publish(angle, distance, buzzer, sim.AMBIENT_TEMP)
            time.sleep(sim.SAMPLE_INTERVAL)
    except KeyboardInterrupt:
        log.info("Stopping simulation, clearing scan topics...")
        for info in pub.clear(sim.AMBIENT_TEMP):
            info.wait_for_publish(timeout=2)
    finally:
        pub.close()


if __name__ == "__main__":
    main()
