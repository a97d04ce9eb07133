"""
Dream League: athlete progression, team rosters and single-elimination
tournaments, with a sqlite store and a FastAPI surface.
"""
__version__ = "0.1.0"
