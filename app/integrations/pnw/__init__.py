"""Politics & War feed integration.

GraphQL war queries for polling, the war subscription handshake and the
Pusher websocket transport for push delivery, and payload parsing into
ConflictEvent models.
"""
