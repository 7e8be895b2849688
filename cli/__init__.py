"""Command line front end for the gateway plugin tools."""
