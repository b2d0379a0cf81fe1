"""Core trigger engine: indicators, candle series, rules and state board.

This package contains pure business logic with no I/O dependencies
(no network or disk access). The app/ package feeds it history and live
ticks and exposes the resulting trigger states.
"""
