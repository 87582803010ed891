"""
scanradar package
=================

Live polar radar display for a servo-swept ultrasonic range sensor.
"""

__all__ = [
    "constants",
    "config",
    "logging_config",
    "exceptions",
    "geometry",
    "sweep",
    "canvas",
    "status",
    "store",
    "wire",
    "mqtt_client",
    "serial_reader",
    "gui",
    "simulator",
]

__version__ = "1.2"
