"""Core data models and the provider aggregation engine"""
