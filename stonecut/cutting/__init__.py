"""
Stone cutting engine.

Pure Python math. No I/O, no persistence.
Given stock dimensions, demand lists and price tables, decide how stock is cut,
which remnants result, how remnants satisfy later demand, and what the cutting
costs. Callers own the remnant pool and pass it into every allocation.
"""
