"""
Dock-intake matching against expected and manifest shipments.
"""
