"""Delivery bounded context: last-mile dispatch and cash reconciliation.

Assigns shipped orders and batched manifests (bordereaux) to delivery agents,
tracks delivery outcomes through the order status state machine, and
reconciles cash collected in the field against deposits made with the company.
Aggregates are persisted with CQRS; balances and analytics are derived on read.
"""

from protean.domain import Domain

delivery = Domain(name="delivery")
