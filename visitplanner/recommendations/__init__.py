"""
Trip strategy recommendation engine.

Responsibilities:
- Classify whether on-street parking is enforced for a day and arrival time.
- Load the static venue and parking facility catalog.
- Evaluate the ordered rule table over resolved trip preferences.
- Return ordered strategy cards ready for API serialisation and rendering.
"""
