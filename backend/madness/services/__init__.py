"""
Services layer: ranking, seeding, bracket graph and bracket state.

Services take sessions or plain domain values and return domain values.
Nothing here depends on FastAPI request/response objects.
"""
