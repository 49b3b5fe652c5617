"""Adapters binding the domain ports to NetBox and discovery inputs."""
