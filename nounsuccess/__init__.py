"""
Noun Success terminal client: dashboard widgets, AI tutor chat and document
viewer on top of the platform's REST API.
"""
