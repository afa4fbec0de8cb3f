"""
Aqman Gateway - device registry and state proxy for Aqman air-quality units.

This service handles:
- Registration of device network addresses reported by the units
- Listing of registered devices
- Proxying state queries to the units with normalized responses

The application lives in ``aqman_gateway.main`` (``create_app``, ``app``,
``main``); it is not imported here so that the registry and models can be
used without reading the service environment.
"""

__version__ = "1.0.0"
