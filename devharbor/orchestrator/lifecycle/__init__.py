"""Pure lifecycle helpers shared by the orchestrators.

Status interpretation, manifest rendering, patch construction, URL/ports
derivation and bounded polling.  Nothing here holds state.
"""
