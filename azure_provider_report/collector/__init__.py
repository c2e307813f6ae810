"""Per-subscription provider collection"""
