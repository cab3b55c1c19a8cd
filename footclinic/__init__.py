"""
Diabetic-foot wound clinic: WIfI scoring, alerting and surgical referrals.
"""

__version__ = "1.0.0"
