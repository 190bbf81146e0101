"""
errsim: exhaustive error-path simulation.

Enumerates every success, fault and abort outcome of the acquire and
release operations a scenario performs, and checks that the scenario
releases its resources in order and reports the right error on every
path of the execution tree.
"""

__version__ = "0.1.0"
