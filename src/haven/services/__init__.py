"""
Haven Service Layer

Access policy, identity, audit and session services. Request
handlers compose these; they never talk to the ORM directly for
authorization decisions.
"""
