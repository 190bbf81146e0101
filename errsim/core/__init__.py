"""
Core simulation engine for errsim.

Contains the outcome taxonomy, operation frames, the backtracking
history, the outcome ledger, policy configuration, the acquire/release
protocol checker and the enumerator that drives a scenario through
every reachable combination of outcomes.
"""
