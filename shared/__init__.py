"""
Shared Kernel

Base classes and utilities shared by the booking, payment and listing
contexts: domain events, value objects, the error taxonomy, the unit of
work and the in-process message bus.
"""
