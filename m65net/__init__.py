"""TCP terminal, UDP echo server, IPv4 packet headers, and a simulated memory, console, clock and random generators."""

__version__ = "0.1.0"