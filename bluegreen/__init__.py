"""
BlueGreen Router

Splits document traffic between a production deployment and a
release-candidate deployment, with a client-held sticky decision.

Sub-modules should be imported from directly, e.g.
``from bluegreen.routing.orchestrator import RoutingOrchestrator``.
"""

__version__ = "1.0.0"
