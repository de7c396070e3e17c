"""
Classroom performance engine.

Read-path aggregation and ranking of student exam and activity results.
"""
