"""
Two-wheeler registration analytics.

Parses monthly RTO registration extracts, classifies each office into
Metro / Urban / Rural, and produces the breakdowns and forecasts the
dashboard renders.
"""
