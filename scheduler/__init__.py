"""
Scheduling core: candidate generation, history reconciliation and the global constraint-repair pass.
"""
