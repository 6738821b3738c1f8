"""
availabilityfinder - find free time windows across one or more calendars.
"""

__version__ = "0.1.0"
