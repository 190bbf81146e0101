"""
Example scenarios for errsim.

Each scenario models a small resource-handling task (copying between
storage objects, converting through a pipe, writing through a wrapper)
whose operations are simulated. A solution is a function implementing
the task; the enumerator checks that it propagates errors and releases
resources correctly on every path.
"""
