"""dh2e — command line front end for the DH2E rules engine."""

__version__ = "0.1.0"
