"""Dependency scheduling core.

build_graph -> schedule is the whole pipeline; feasibility is an independent
read-only pass over an order someone already computed. Everything here is a
pure function over request-scoped values, so calls may run concurrently.
"""
