"""Parish back-office API: service requests, sacrament records, certificate registry."""

__version__ = "1.0.0"
