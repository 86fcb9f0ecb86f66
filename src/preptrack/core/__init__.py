"""Domain logic for the exam-preparation tracker.

Modules:
- syllabus, progress, analytics: chapter lists, per-chapter progress, charts
- goals: daily goals with streak and points rewards
- mistakes: mistake notebook
- users, auth, pattern_lock, security: accounts, sessions, credentials
- groups, social: study groups and the photo feed
- premium, moderation, spectate, contact: admin console features
- countdown, timetable: exam countdown and LLM revision plans
"""
