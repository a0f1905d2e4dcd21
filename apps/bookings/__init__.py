"""Bookings app package.

This app encapsulates the reservation side of the chalet: temporary
holds, confirmed bookings, the room-night ledger and the availability
resolver. Every write that claims room-nights re-checks availability
inside the same database transaction, backed by a unique constraint on
(room, night).
"""
