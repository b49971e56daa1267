"""
Services layer - classification and triage logic.

DESIGN PRINCIPLE:
- The category mapper, fallback resolver and priority scorer are pure and stateless
- External collaborators (image labeling) live behind label_provider and never raise
- Persistence and transport stay with the caller
"""
