"""HTML report generation"""
