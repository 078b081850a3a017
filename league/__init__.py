"""
Ladder league: scoring, bonuses, promotion and standings for table-based
multi-round tournaments.
"""
