"""Properties app package.

Holds the catalog side the booking engine reads: properties and the
bookable units inside them, each with a nightly base price and an
optional date-bounded discount rule. Catalog editing happens through the
admin; the engine only looks units up.
"""
