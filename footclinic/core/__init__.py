"""
Domain logic: scoring, alerting, referrals, worklist, patient registry.
"""
