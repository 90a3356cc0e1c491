"""Tenants app package.

Each tenant is an independent organisation sharing this deployment. Every
booking-engine row carries a tenant foreign key and every repository call
takes the tenant id as a mandatory argument. Tenant onboarding itself is
handled elsewhere; this app only stores the booking policy the engine
consults (minimum deposit, default currency).
"""
