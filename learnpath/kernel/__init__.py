"""
Kernel Layer

Persistence models shared by every engine: learning content, per-content
progress and the consolidated study plan progress record.
"""
