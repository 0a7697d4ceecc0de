#!/usr/bin/env python3
"""LogicMonitor Instance Toggle entry point.

Example Usage:
    $ python main.py --device-id 42 --module-name snmp64_if-
    $ python main.py --device-id 42 --module-id 1234 --alerting-only

See src/lmtoggle/cli.py for every option.
"""
from src.lmtoggle.cli import main

if __name__ == "__main__":
    main()
