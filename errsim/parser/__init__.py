"""
Execution path parser for errsim.

Provides lexical analysis and parsing of the path notation used to
replay a single execution (``key=Mode, key=Mode, ...``).
"""
