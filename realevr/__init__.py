"""
RealEVR Listings API: property listings, virtual tours and payments.
"""
