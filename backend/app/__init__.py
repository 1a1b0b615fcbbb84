"""
MindEase Backend Application Package

Mood check-ins, therapy session records, the supportive chat assistant and
the engagement analytics shown on the dashboard.
"""
