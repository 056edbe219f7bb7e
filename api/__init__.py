"""
HTTP layer

One router per resource. Routers translate domain exceptions from core/
into HTTP status codes; business rules live in core/ and services/.
"""
