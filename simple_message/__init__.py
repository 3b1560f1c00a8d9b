"""Simple message protocol for industrial robot controllers: framing, typed messages and TCP/UDP transports."""

__version__ = "0.1.0"

__all__ = [
    "connection",
    "message",
    "robot_status",
    "socket_base",
    "tcp",
    "udp",
    "utils",
    "velocity",
]