"""
Unit tests for the cart engine

These call CartService directly with a database session, bypassing HTTP,
to pin down the cart rules: totals, replace-on-re-add, frozen prices and
the NotFound / Unavailable / InvalidArgument failure modes.
"""
