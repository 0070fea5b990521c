"""BidChemz Logistics.

Backend for a B2B chemical freight marketplace. Traders publish freight
requests ("quotes"), verified logistics partners bid on them with offers and
pay a per-lead fee from a prepaid wallet, and the selected offer becomes a
tracked shipment.

Core subpackages
----------------

- ``bidchemz_logistics.core``:

  - Logging and optional Logfire monitoring.
  - SQLModel entities, async session management and repositories.
  - Domain enums and the Pydantic I/O contracts of the HTTP API.

- ``bidchemz_logistics.services``:

  - Business helpers: partner matching, lead pricing, quote timers, wallet
    accounting, notifications, signed webhooks, file encryption, rate
    limiting and the periodic background jobs.

- ``bidchemz_logistics.server``:

  - The FastAPI application, its configuration, middleware and routers.

Typical workflow
----------------

1. A trader creates a quote; matching partners are notified and the quote
   timer starts.
2. Partners submit offers; each offer debits the lead fee from the wallet.
3. The trader selects one offer, which books a shipment.
4. The partner posts tracking updates until the shipment is delivered.
"""
