"""Service layer: business rules on top of the repositories.

Each service works inside the request's session and commits once at the end
of a mutating operation, so row changes and counter changes land together.
"""
