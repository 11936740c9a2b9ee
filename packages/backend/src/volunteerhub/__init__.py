"""VolunteerHub — real-time messaging core for the volunteer matching platform.

NGOs and volunteers exchange chat messages and receive notifications.
This package holds the REST surface, the live WebSocket gateway, and the
stores behind them.
"""

__version__ = "0.1.0"
