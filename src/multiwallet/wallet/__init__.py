"""
Key management and Bitcoin transaction primitives.
"""
