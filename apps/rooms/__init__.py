"""Rooms app package.

Holds the chalet's room reference data and the admin blockages that
take room-nights out of sale. Blockages have the highest precedence in
availability resolution.
"""
