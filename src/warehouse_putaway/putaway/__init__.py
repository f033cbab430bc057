"""
Put-away package.

Ranks storage locations for an item or batch and decides whether a chosen
move needs an explicit operator override.
"""
