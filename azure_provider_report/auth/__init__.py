"""Azure authentication"""
