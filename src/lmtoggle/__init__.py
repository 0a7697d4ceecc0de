"""Enable or disable LogicMonitor module instances from the command line."""

__version__ = "1.0.0"
