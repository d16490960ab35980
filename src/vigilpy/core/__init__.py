"""Core domain: models, ports, statistics, rules and health."""
