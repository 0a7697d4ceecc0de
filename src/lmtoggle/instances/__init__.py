"""Instance Toggle Module.

Enable or disable alerting and monitoring on the instances of modules
applied to a single LogicMonitor device:
- Page through the device's applied modules
- Select modules by name and/or by device-scoped id
- List each module's instances, optionally filtered
- PATCH every instance, isolating per-instance failures

Architecture: Clean Architecture with Hexagonal (Ports & Adapters)
"""
