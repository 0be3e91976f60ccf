"""
Daily Sales Goal Tracker

Hourly goal allocation, advisor self-reporting and store metrics for retail teams.
"""

__version__ = "1.0.0"
